"""Tests for the plant catalog, user collections and identification."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi import status
from sqlalchemy import select
from sqlalchemy.orm import Session

from models.plant import Plant, user_plant
from models.user import User
from services.auth import Principal
from services.exceptions import ConflictError
from services.plant_service import PlantService
from tests.conftest import bearer
from tests.fixtures.test_data import (
    BASIL,
    FICUS,
    MONSTERA,
    PHOTO_URL,
    PLANTNET_IDENTIFY_RESPONSE,
    PLANTNET_NOT_FOUND_RESPONSE,
)


def make_plant(db: Session, data: dict) -> Plant:
    plant, _ = PlantService(db).first_or_create(**data)
    return plant


def _upstream_response(status_code: int, body) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = "Not Found" if status_code == 404 else "OK"
    response.json.return_value = body
    return response


@pytest.mark.integration
class TestCatalog:
    """Test plant creation and lookup."""

    def test_create_plant(self, client, auth_headers, db_session: Session):
        response = client.post("/plant/create", json=FICUS, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Plant registered successfully"
        plant = db_session.get(Plant, response.json()["id"])
        assert plant.common_names == ["Rubber Plant", "Rubber Tree"]
        assert len(plant.images) == 2

    def test_create_without_common_names(self, client, auth_headers):
        response = client.post("/plant/create", json=BASIL, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK

    def test_create_duplicate(self, client, db_session, auth_headers):
        make_plant(db_session, FICUS)

        response = client.post("/plant/create", json=FICUS, headers=auth_headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "A plant with the given scientific name already exists"

    def test_create_missing_fields(self, client, auth_headers):
        response = client.post("/plant/create", json={"scientific_name": "Ficus elastica"}, headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Parameters missing: family, images not present"

    def test_first_or_create(self, client, auth_headers):
        created = client.post("/plant/firstOrCreate", json=MONSTERA, headers=auth_headers)
        existing = client.post("/plant/firstOrCreate", json=MONSTERA, headers=auth_headers)

        assert created.status_code == status.HTTP_200_OK
        assert created.json()["created"] is True
        assert created.json()["message"] == "Plant registered successfully"
        assert existing.status_code == status.HTTP_200_OK
        assert existing.json()["created"] is False
        assert existing.json()["message"] == "A plant with the given scientific name already exists"
        assert existing.json()["id"] == created.json()["id"]

    def test_create_losing_insert_race(self, db_session: Session):
        """A duplicate inserted after the name check is reported as a conflict."""
        make_plant(db_session, FICUS)
        service = PlantService(db_session)

        with patch.object(service.plants, "by_scientific_name", return_value=None):
            with pytest.raises(ConflictError):
                service.create(**FICUS)

        assert db_session.query(Plant).count() == 1

    def test_get_plant_id_by_name(self, client, db_session, auth_headers):
        plant = make_plant(db_session, FICUS)

        found = client.get("/plant/name/Ficus elastica", headers=auth_headers)
        missing = client.get("/plant/name/Rosa canina", headers=auth_headers)

        assert found.json() == {"id": plant.id}
        assert missing.status_code == status.HTTP_404_NOT_FOUND
        assert missing.json()["detail"] == "Plant not found"

    def test_get_plant(self, client, db_session, auth_headers):
        plant = make_plant(db_session, FICUS)

        response = client.get(f"/plant/{plant.id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["family"] == "Moraceae"

    def test_list_plants(self, client, db_session, auth_headers):
        for data in (FICUS, MONSTERA, BASIL):
            make_plant(db_session, data)

        everything = client.get("/plant", headers=auth_headers)
        paged = client.get("/plant", params={"page": 1, "limit": 2}, headers=auth_headers)

        assert len(everything.json()["plants"]) == 3
        assert len(paged.json()["plants"]) == 2
        assert paged.json()["total_pages"] == 2


@pytest.mark.integration
class TestCollection:
    """Test associate, dissociate and user plant listing."""

    def test_associate_statuses(self, client, db_session, test_user: User, auth_headers):
        plant = make_plant(db_session, FICUS)

        first = client.post("/plant/associate", json={"plant_id": plant.id}, headers=auth_headers)
        again = client.post("/plant/associate", json={"plant_id": plant.id}, headers=auth_headers)

        assert first.status_code == status.HTTP_201_CREATED
        assert first.json() == {
            "message": "Plant associated successfully",
            "user_id": test_user.id,
            "plant_id": plant.id,
        }
        assert again.status_code == status.HTTP_200_OK
        assert again.json()["message"] == "The association already existed"
        rows = db_session.execute(select(user_plant)).all()
        assert len(rows) == 1

    def test_associate_losing_insert_race(self, db_session: Session, test_user: User):
        plant = make_plant(db_session, FICUS)
        service = PlantService(db_session)
        principal = Principal(user_id=test_user.id)
        assert service.associate(principal, plant.id) is True

        with patch.object(service.user_plants, "exists", return_value=False):
            assert service.associate(principal, plant.id) is False

        assert len(db_session.execute(select(user_plant)).all()) == 1

    def test_associate_unknown_plant(self, client, auth_headers):
        response = client.post("/plant/associate", json={"plant_id": 999}, headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_associate_missing_plant_id(self, client, auth_headers):
        response = client.post("/plant/associate", json={}, headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Parameters missing: plant_id not present"

    def test_dissociate(self, client, db_session, auth_headers):
        plant = make_plant(db_session, FICUS)
        client.post("/plant/associate", json={"plant_id": plant.id}, headers=auth_headers)

        removed = client.delete(f"/plant/disassociate/{plant.id}", headers=auth_headers)
        again = client.delete(f"/plant/disassociate/{plant.id}", headers=auth_headers)

        assert removed.status_code == status.HTTP_200_OK
        assert removed.json()["message"] == "Plant dissociated successfully from user"
        assert again.status_code == status.HTTP_404_NOT_FOUND
        assert again.json()["detail"] == "Association not found or already removed"

    def test_is_associated(self, client, db_session, other_user: User, auth_headers):
        plant = make_plant(db_session, FICUS)
        client.post("/plant/associate", json={"plant_id": plant.id}, headers=auth_headers)

        mine = client.get(f"/plant/{plant.id}/isAssociated", headers=auth_headers)
        theirs = client.get(f"/plant/{plant.id}/isAssociated", headers=bearer(other_user))

        assert mine.json() == {"associated": True}
        assert theirs.json() == {"associated": False}

    def test_get_user_plants(self, client, db_session, test_user: User, auth_headers):
        for data in (FICUS, MONSTERA, BASIL):
            plant = make_plant(db_session, data)
            client.post("/plant/associate", json={"plant_id": plant.id}, headers=auth_headers)

        everything = client.get(f"/plant/getUserPlants/{test_user.id}", headers=auth_headers)
        paged = client.get(
            f"/plant/getUserPlants/{test_user.id}",
            params={"page": 2, "limit": 2},
            headers=auth_headers,
        )

        assert everything.status_code == status.HTTP_200_OK
        assert len(everything.json()["plants"]) == 3
        assert "total_pages" not in everything.json()
        assert paged.json()["total_pages"] == 2
        assert [p["scientific_name"] for p in paged.json()["plants"]] == ["Ocimum basilicum"]

    def test_user_without_plants(self, client, other_user: User, auth_headers):
        response = client.get(f"/plant/getUserPlants/{other_user.id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"plants": []}


class TestIdentify:
    """Test POST /plant/identify against a mocked Pl@ntNet."""

    @patch("services.plant_identification.requests.get")
    def test_identify_success(self, mock_get, client, auth_headers):
        mock_get.return_value = _upstream_response(200, PLANTNET_IDENTIFY_RESPONSE)

        response = client.post("/plant/identify", json={"photo_url": PHOTO_URL, "lang": "es"}, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["bestMatch"] == "Ficus elastica Roxb. ex Hornem."
        params = mock_get.call_args.kwargs["params"]
        assert params["images"] == PHOTO_URL
        assert params["lang"] == "es"
        assert "api-key" in params
        assert mock_get.call_args.kwargs["timeout"] > 0

    @patch("services.plant_identification.requests.get")
    def test_identify_relays_upstream_error(self, mock_get, client, auth_headers):
        mock_get.return_value = _upstream_response(404, PLANTNET_NOT_FOUND_RESPONSE)

        response = client.post("/plant/identify", json={"photo_url": PHOTO_URL, "lang": "es"}, headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Species not found"

    @patch("services.plant_identification.requests.get")
    def test_identify_transport_failure(self, mock_get, client, auth_headers):
        mock_get.side_effect = requests.exceptions.ConnectionError("connection refused")

        response = client.post("/plant/identify", json={"photo_url": PHOTO_URL, "lang": "es"}, headers=auth_headers)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == "Error processing request."

    @patch("services.plant_identification.requests.get")
    def test_identify_non_json_body(self, mock_get, client, auth_headers):
        upstream = _upstream_response(200, None)
        upstream.json.side_effect = ValueError("not json")
        mock_get.return_value = upstream

        response = client.post("/plant/identify", json={"photo_url": PHOTO_URL, "lang": "es"}, headers=auth_headers)
        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR

    def test_identify_missing_params(self, client, auth_headers):
        response = client.post("/plant/identify", json={"lang": "es"}, headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Parameters missing: photo_url not present"
