"""Caller identity passed explicitly into every service call."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ActorContext:
    """Who is calling, and whether they hold an admin session.

    Attributes:
        actor_id: Admin user id, or None for anonymous patients
        is_privileged: True when the caller has a valid admin session
        ip_address: Client address, recorded in the audit log
        user_agent: Client user agent, recorded in the audit log
    """

    actor_id: int | None = None
    is_privileged: bool = False
    ip_address: str | None = None
    user_agent: str | None = None

    @classmethod
    def anonymous(cls, ip_address: str | None = None, user_agent: str | None = None) -> "ActorContext":
        return cls(ip_address=ip_address, user_agent=user_agent)

    @classmethod
    def admin(
        cls,
        actor_id: int,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> "ActorContext":
        return cls(
            actor_id=actor_id,
            is_privileged=True,
            ip_address=ip_address,
            user_agent=user_agent,
        )
