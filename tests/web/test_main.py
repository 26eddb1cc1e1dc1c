from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from podrec.api.exceptions import APIRequestError
from podrec.api.listennotes_client import ListenNotesAPIClient
from podrec.config import Settings, get_settings
from podrec.models.podcast import Podcast
from podrec.models.recommendation import Recommendation
from podrec.services.candidate_service import CandidateService
from podrec.services.recommendation_service import RecommendationService
from podrec.web import main
from podrec.web.main import (
    app,
    get_candidate_service,
    get_catalog_client,
    get_recommendation_service,
)

FAVORITE = {
    "id": "fav1",
    "title_original": "History Hour",
    "description_original": "history empires battles",
    "publisher_original": "Old Media",
    "genre_ids": [125],
}

@pytest.fixture
def candidate_service():
    service = MagicMock(spec=CandidateService)
    service.get_candidate_podcasts = AsyncMock(return_value=[Podcast(id="c1", title="War Stories")])
    return service

@pytest.fixture
def recommendation_service():
    service = MagicMock(spec=RecommendationService)
    service.generate_recommendations = AsyncMock(return_value=[
        Recommendation(
            podcast=Podcast(id="c1", title="War Stories"),
            similarity_score=0.8,
            semantic_score=0.9,
            topic_score=0.1,
            reason='Similar to "History Hour". Very strong content match.',
            most_similar_to="fav1",
        )
    ])
    return service

@pytest.fixture
def catalog_client():
    return MagicMock(spec=ListenNotesAPIClient)

@pytest.fixture
def client(candidate_service, recommendation_service, catalog_client):
    app.dependency_overrides[get_candidate_service] = lambda: candidate_service
    app.dependency_overrides[get_recommendation_service] = lambda: recommendation_service
    app.dependency_overrides[get_catalog_client] = lambda: catalog_client
    yield TestClient(app)
    app.dependency_overrides.clear()

def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Podcast Recommendation API is running."}

@pytest.mark.parametrize("payload", [{}, {"favorites": []}, {"favorites": None}])
def test_recommendations_require_favorites(client, candidate_service, payload):
    response = client.post("/api/recommendations", json=payload)

    assert response.status_code == 400
    assert response.json() == {"message": "Favorites list is required and must be an array", "recommendations": []}
    candidate_service.get_candidate_podcasts.assert_not_called()

def test_recommendations_success(client, candidate_service, recommendation_service):
    response = client.post("/api/recommendations", json={"favorites": [FAVORITE]})

    assert response.status_code == 200
    body = response.json()
    assert len(body["recommendations"]) == 1
    rec = body["recommendations"][0]
    assert rec["podcast"]["id"] == "c1"
    assert rec["match_percent"] == 80
    assert rec["most_similar_to"] == "fav1"

    favorites = candidate_service.get_candidate_podcasts.call_args.args[0]
    assert favorites[0].title == "History Hour"
    assert favorites[0].publisher == "Old Media"
    recommendation_service.generate_recommendations.assert_awaited_once()

def test_recommendations_without_candidates(client, candidate_service, recommendation_service):
    candidate_service.get_candidate_podcasts.return_value = []

    response = client.post("/api/recommendations", json={"favorites": [FAVORITE]})

    assert response.status_code == 404
    assert response.json()["message"].startswith("No potential recommendations found.")
    assert response.json()["recommendations"] == []
    recommendation_service.generate_recommendations.assert_not_called()

def test_recommendations_when_ranking_yields_nothing(client, recommendation_service):
    recommendation_service.generate_recommendations.return_value = []

    response = client.post("/api/recommendations", json={"favorites": [FAVORITE]})

    assert response.status_code == 404
    assert response.json()["message"].startswith("Could not generate meaningful recommendations.")

def test_search_forwards_filters(client, catalog_client):
    catalog_client.search_podcasts.return_value = {"results": [{"id": "p1"}]}

    response = client.get("/api/podcasts/search", params={"query": "history", "genre_ids": "125,99", "page_size": 5})

    assert response.status_code == 200
    assert response.json() == {"results": [{"id": "p1"}]}
    catalog_client.search_podcasts.assert_called_once_with(
        "history", sort_by_date=0, len_min=0, len_max=None, genre_ids="125,99",
        page_size=5, only_in="title,description",
    )

def test_search_page_size_is_bounded(client):
    assert client.get("/api/podcasts/search", params={"query": "x", "page_size": 50}).status_code == 422

def test_upstream_error_is_reported(client, catalog_client):
    catalog_client.get_podcast.side_effect = APIRequestError("Client error 404", status_code=404)

    response = client.get("/api/podcasts/missing")

    assert response.status_code == 404
    assert response.json() == {"message": "External API request failed", "details": "Client error 404"}

def test_upstream_error_without_status_is_500(client, catalog_client):
    catalog_client.get_genres.side_effect = APIRequestError("Request timed out")

    response = client.get("/api/genres")

    assert response.status_code == 500

def test_trending(client, catalog_client):
    catalog_client.get_best_podcasts.return_value = {"podcasts": []}

    response = client.get("/api/trending", params={"genre_id": 68})

    assert response.status_code == 200
    catalog_client.get_best_podcasts.assert_called_once_with(genre_id=68, page_size=10)

@pytest.mark.parametrize("favorites", ["abc", {"id": "fav1"}, 42])
def test_recommendations_reject_non_array_favorites(client, candidate_service, favorites):
    response = client.post("/api/recommendations", json={"favorites": favorites})

    assert response.status_code == 400
    assert response.json() == {"message": "Favorites list is required and must be an array", "recommendations": []}
    candidate_service.get_candidate_podcasts.assert_not_called()

def test_missing_catalog_key_is_a_server_error(client, monkeypatch):
    monkeypatch.setattr(main, "_clients", {})
    del app.dependency_overrides[get_catalog_client]
    app.dependency_overrides[get_settings] = lambda: Settings(_env_file=None, LISTENNOTES_API_KEY=None)

    response = client.get("/api/genres")

    assert response.status_code == 500
    assert response.json() == {
        "message": "External API request failed",
        "details": "Listen Notes API key not configured",
    }
