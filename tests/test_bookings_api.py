"""Booking and schedule endpoint tests."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import FOLLOWING_FRIDAY, LAST_FRIDAY, NEXT_FRIDAY, THURSDAY, add_booking

BOOKINGS_URL = "/api/v1/bookings"


def _payload(**overrides) -> dict:
    data = {
        "booking_date": NEXT_FRIDAY.isoformat(),
        "slot_index": 0,
        "time_slot": "15:15",
        "chair": "rojo",
        "patient_name": "Lucia Garcia",
        "patient_email": "lucia@alu.medac.es",
    }
    data.update(overrides)
    return data


class TestCreateBookingEndpoint:
    """POST /bookings."""

    async def test_create_returns_201_with_id(self, api_client: AsyncClient) -> None:
        response = await api_client.post(BOOKINGS_URL, json=_payload())

        assert response.status_code == 201
        booking_id = response.json()["id"]

        fetched = await api_client.get(f"{BOOKINGS_URL}/{booking_id}")
        assert fetched.status_code == 200
        body = fetched.json()
        assert body["booking_date"] == NEXT_FRIDAY.isoformat()
        assert body["time_slot"] == "15:15"
        assert body["created_by"] is None

    async def test_missing_fields_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(BOOKINGS_URL, json={"chair": "rojo"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert "booking_date" in body["fields"]
        assert "patient_email" in body["fields"]

    async def test_wrong_weekday_is_400_business_rule(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            BOOKINGS_URL, json=_payload(booking_date=THURSDAY.isoformat())
        )

        assert response.status_code == 400
        assert response.json()["error"] == "business_rule_error"

    async def test_past_date_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            BOOKINGS_URL, json=_payload(booking_date=LAST_FRIDAY.isoformat())
        )

        assert response.status_code == 400
        assert response.json()["error"] == "business_rule_error"

    async def test_disallowed_email_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            BOOKINGS_URL, json=_payload(patient_email="lucia@gmail.com")
        )

        assert response.status_code == 400
        assert response.json()["fields"] == ["patient_email"]

    async def test_markup_in_email_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            BOOKINGS_URL, json=_payload(patient_email="<script>@medac.es")
        )

        assert response.status_code == 400
        assert response.json()["fields"] == ["patient_email"]

    @pytest.mark.parametrize("slot_index", ["abc", [1], {"i": 1}])
    async def test_non_integer_slot_index_is_400(
        self, api_client: AsyncClient, slot_index
    ) -> None:
        response = await api_client.post(BOOKINGS_URL, json=_payload(slot_index=slot_index))

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["fields"] == ["slot_index"]

    async def test_oversized_name_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(BOOKINGS_URL, json=_payload(patient_name="x" * 151))

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["fields"] == ["patient_name"]

    async def test_unparseable_body_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            BOOKINGS_URL,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    async def test_padded_time_slot_is_accepted(self, api_client: AsyncClient) -> None:
        response = await api_client.post(BOOKINGS_URL, json=_payload(time_slot=" 15:15 "))

        assert response.status_code == 201
        booking_id = response.json()["id"]
        fetched = await api_client.get(f"{BOOKINGS_URL}/{booking_id}")
        assert fetched.json()["time_slot"] == "15:15"

    async def test_double_booking_is_409(self, api_client: AsyncClient) -> None:
        first = await api_client.post(BOOKINGS_URL, json=_payload())
        second = await api_client.post(
            BOOKINGS_URL, json=_payload(patient_email="otra@medac.es")
        )

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json() == {
            "detail": "This slot and chair are already booked",
            "error": "conflict",
        }

    async def test_admin_creation_is_stamped(
        self, api_client: AsyncClient, admin_auth_headers: dict[str, str], admin_user
    ) -> None:
        response = await api_client.post(BOOKINGS_URL, json=_payload(), headers=admin_auth_headers)
        booking_id = response.json()["id"]

        fetched = await api_client.get(f"{BOOKINGS_URL}/{booking_id}")
        assert fetched.json()["created_by"] == admin_user.id


class TestListBookingsEndpoint:
    """GET /bookings."""

    async def test_list_by_date(self, api_client: AsyncClient, async_session: AsyncSession) -> None:
        await add_booking(async_session, NEXT_FRIDAY, 1, "azul")
        await add_booking(async_session, NEXT_FRIDAY, 0, "rojo")
        await add_booking(async_session, FOLLOWING_FRIDAY, 0, "rojo")

        response = await api_client.get(BOOKINGS_URL, params={"date": NEXT_FRIDAY.isoformat()})

        assert response.status_code == 200
        assert [(b["slot_index"], b["chair"]) for b in response.json()] == [(0, "rojo"), (1, "azul")]

    async def test_list_by_email_and_id(
        self, api_client: AsyncClient, async_session: AsyncSession
    ) -> None:
        booking = await add_booking(async_session, patient_email="ana@medac.es")
        await add_booking(async_session, NEXT_FRIDAY, 1, "rojo", patient_email="luis@medac.es")

        by_email = await api_client.get(BOOKINGS_URL, params={"email": "ana@medac.es"})
        by_id = await api_client.get(BOOKINGS_URL, params={"id": booking.id})

        assert [b["id"] for b in by_email.json()] == [booking.id]
        assert [b["id"] for b in by_id.json()] == [booking.id]

    async def test_malformed_date_filter_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.get(BOOKINGS_URL, params={"date": "2030-1-4"})
        assert response.status_code == 400

    async def test_get_missing_booking_is_404(self, api_client: AsyncClient) -> None:
        response = await api_client.get(f"{BOOKINGS_URL}/999")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestUpdateBookingEndpoint:
    """PUT /bookings/{id}."""

    async def test_requires_admin(self, api_client: AsyncClient, async_session: AsyncSession) -> None:
        booking = await add_booking(async_session)

        response = await api_client.put(
            f"{BOOKINGS_URL}/{booking.id}",
            json={"patient_name": "Ana", "patient_email": "ana@medac.es"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "authorization_error"

    async def test_admin_updates_patient_details(
        self,
        api_client: AsyncClient,
        async_session: AsyncSession,
        admin_auth_headers: dict[str, str],
    ) -> None:
        booking = await add_booking(async_session)

        response = await api_client.put(
            f"{BOOKINGS_URL}/{booking.id}",
            json={"patient_name": "Ana Lopez", "patient_email": "ana@medac.es"},
            headers=admin_auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["patient_name"] == "Ana Lopez"
        assert body["chair"] == "rojo"

    async def test_update_missing_is_404(
        self, api_client: AsyncClient, admin_auth_headers: dict[str, str]
    ) -> None:
        response = await api_client.put(
            f"{BOOKINGS_URL}/999",
            json={"patient_name": "Ana", "patient_email": "ana@medac.es"},
            headers=admin_auth_headers,
        )
        assert response.status_code == 404

    async def test_invalid_token_is_treated_as_anonymous(
        self, api_client: AsyncClient, async_session: AsyncSession
    ) -> None:
        booking = await add_booking(async_session)

        response = await api_client.put(
            f"{BOOKINGS_URL}/{booking.id}",
            json={"patient_name": "Ana", "patient_email": "ana@medac.es"},
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401


class TestDeleteBookingsEndpoint:
    """DELETE /bookings?id=|email=."""

    async def test_delete_by_email(self, api_client: AsyncClient, async_session: AsyncSession) -> None:
        await add_booking(async_session, NEXT_FRIDAY, 0, "rojo", patient_email="ana@medac.es")
        await add_booking(async_session, NEXT_FRIDAY, 1, "rojo", patient_email="ana@medac.es")

        response = await api_client.delete(BOOKINGS_URL, params={"email": "ana@medac.es"})

        assert response.status_code == 200
        assert response.json() == {"deleted_count": 2}

    async def test_delete_by_email_without_matches_is_404(self, api_client: AsyncClient) -> None:
        response = await api_client.delete(BOOKINGS_URL, params={"email": "nadie@medac.es"})
        assert response.status_code == 404

    async def test_delete_by_id_requires_admin(
        self, api_client: AsyncClient, async_session: AsyncSession
    ) -> None:
        booking = await add_booking(async_session)

        response = await api_client.delete(BOOKINGS_URL, params={"id": booking.id})
        assert response.status_code == 401

    async def test_admin_delete_by_id(
        self,
        api_client: AsyncClient,
        async_session: AsyncSession,
        admin_auth_headers: dict[str, str],
    ) -> None:
        booking = await add_booking(async_session)

        response = await api_client.delete(
            BOOKINGS_URL, params={"id": booking.id}, headers=admin_auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {"deleted_count": 1}

    async def test_no_selector_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.delete(BOOKINGS_URL)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestScheduleEndpoints:
    """GET /schedule and per-date views."""

    async def test_schedule(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/api/v1/schedule")

        assert response.status_code == 200
        body = response.json()
        assert body["weekday_name"] == "Friday"
        assert body["chairs"] == ["rojo", "azul", "amarillo"]
        assert body["allowed_email_domains"] == ["alu.medac.es", "medac.es"]
        assert [s["start_time"] for s in body["slots"]][:2] == ["15:15", "15:55"]
        assert len(body["slots"]) == 7

    async def test_availability(self, api_client: AsyncClient, async_session: AsyncSession) -> None:
        for slot in range(5):
            await add_booking(async_session, NEXT_FRIDAY, slot, "azul")

        response = await api_client.get(f"/api/v1/schedule/{NEXT_FRIDAY.isoformat()}/availability")

        assert response.status_code == 200
        assert response.json() == {
            "booking_date": NEXT_FRIDAY.isoformat(),
            "is_bookable": True,
            "total_capacity": 21,
            "occupied": 5,
            "available": 16,
        }

    async def test_availability_bad_date_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/api/v1/schedule/next-friday/availability")
        assert response.status_code == 400

    async def test_day_slots_hide_patient_names_from_public(
        self,
        api_client: AsyncClient,
        async_session: AsyncSession,
        admin_auth_headers: dict[str, str],
    ) -> None:
        await add_booking(async_session, NEXT_FRIDAY, 0, "rojo")
        url = f"/api/v1/schedule/{NEXT_FRIDAY.isoformat()}/slots"

        public = (await api_client.get(url)).json()
        private = (await api_client.get(url, headers=admin_auth_headers)).json()

        assert public[0]["available_chairs"] == 2
        assert public[0]["chairs"][0] == {
            "chair": "rojo",
            "booked": True,
            "booking_id": None,
            "patient_name": None,
        }
        assert private[0]["chairs"][0]["patient_name"] == "Lucia Garcia"
