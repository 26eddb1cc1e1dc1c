import logging
from typing import List, Optional, Dict, Any

from fastapi import FastAPI, Depends, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import Settings, get_settings
from ..api.exceptions import APIClientError
from ..api.listennotes_client import ListenNotesAPIClient
from ..api.embedding_client import HuggingFaceEmbeddingClient
from ..models.recommendation import Recommendation
from ..services.candidate_service import CandidateService
from ..services.recommendation_service import RecommendationService
from ..services.result_standardizer import standardize_favorites
from ..services.similarity_service import SimilarityEngine

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# --- Request / Response Models --- #
class RecommendationRequest(BaseModel):
    # Checked in the route: anything but a non-empty list is a 400
    favorites: Any = Field(None, description="The user's favorite podcasts as returned by the catalog.")

class RecommendationResponse(BaseModel):
    message: Optional[str] = None
    recommendations: List[Recommendation] = Field(default_factory=list)

# --- Dependencies --- #
_clients: Dict[str, Any] = {}

def get_catalog_client(settings: Settings = Depends(get_settings)) -> ListenNotesAPIClient:
    if "catalog" not in _clients:
        _clients["catalog"] = ListenNotesAPIClient(settings)
    return _clients["catalog"]

def get_similarity_engine(settings: Settings = Depends(get_settings)) -> SimilarityEngine:
    # One engine per process so the embedding cache outlives a single request
    if "similarity" not in _clients:
        _clients["similarity"] = SimilarityEngine(HuggingFaceEmbeddingClient(settings), settings=settings)
    return _clients["similarity"]

def get_candidate_service(
    catalog_client: ListenNotesAPIClient = Depends(get_catalog_client),
    settings: Settings = Depends(get_settings),
) -> CandidateService:
    return CandidateService(catalog_client, settings=settings)

def get_recommendation_service(
    engine: SimilarityEngine = Depends(get_similarity_engine),
    settings: Settings = Depends(get_settings),
) -> RecommendationService:
    return RecommendationService(engine, settings=settings)

# --- FastAPI App Initialization --- #
app = FastAPI(
    title="Podcast Recommendation API",
    description="Search the podcast catalog and get explained recommendations from a list of favorites.",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(APIClientError)
async def api_client_error_handler(request: Request, exc: APIClientError):
    logger.error(f"API Error on {request.url.path}: {exc}")
    status_code = exc.status_code if exc.status_code and exc.status_code >= 400 else 500
    return JSONResponse(
        status_code=status_code,
        content={"message": "External API request failed", "details": str(exc)},
    )

@app.get("/", tags=["Status"])
async def read_root():
    return {"message": "Podcast Recommendation API is running."}

@app.post("/api/recommendations", response_model=RecommendationResponse, tags=["Recommendations"])
async def create_recommendations(
    payload: RecommendationRequest,
    candidate_service: CandidateService = Depends(get_candidate_service),
    recommendation_service: RecommendationService = Depends(get_recommendation_service),
):
    """Recommends podcasts similar to the posted favorites."""
    if not isinstance(payload.favorites, list) or not payload.favorites:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Favorites list is required and must be an array", "recommendations": []},
        )

    favorites = standardize_favorites(payload.favorites)
    logger.info(f"Processing {len(favorites)} favorite podcasts")

    candidates = await candidate_service.get_candidate_podcasts(favorites)
    if not candidates:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "message": "No potential recommendations found. Try adding more diverse podcasts to your favorites.",
                "recommendations": [],
            },
        )
    logger.info(f"Found {len(candidates)} candidate podcasts for recommendation")

    recommendations = await recommendation_service.generate_recommendations(favorites, candidates)
    if not recommendations:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "message": "Could not generate meaningful recommendations. Try adding different podcasts to your favorites.",
                "recommendations": [],
            },
        )

    logger.info(f"Successfully generated {len(recommendations)} recommendations")
    return RecommendationResponse(recommendations=recommendations)

@app.get("/api/podcasts/search", tags=["Podcasts"])
def search_podcasts(
    query: str = Query("", description="Search terms"),
    sort_by_date: int = 0,
    len_min: int = 0,
    len_max: Optional[int] = None,
    genre_ids: Optional[str] = Query(None, description="Comma-separated Listen Notes genre ids"),
    page_size: int = Query(10, ge=1, le=10),
    catalog_client: ListenNotesAPIClient = Depends(get_catalog_client),
):
    logger.info(f"Searching for podcasts with query: \"{query}\"")
    return catalog_client.search_podcasts(
        query,
        sort_by_date=sort_by_date,
        len_min=len_min,
        len_max=len_max,
        genre_ids=genre_ids or None,
        page_size=page_size,
        only_in="title,description",
    )

@app.get("/api/genres", tags=["Podcasts"])
def list_genres(catalog_client: ListenNotesAPIClient = Depends(get_catalog_client)):
    return catalog_client.get_genres()

@app.get("/api/trending", tags=["Podcasts"])
def trending_podcasts(
    genre_id: Optional[int] = None,
    page_size: int = Query(10, ge=1, le=20),
    catalog_client: ListenNotesAPIClient = Depends(get_catalog_client),
):
    return catalog_client.get_best_podcasts(genre_id=genre_id, page_size=page_size)

@app.get("/api/podcasts/{podcast_id}", tags=["Podcasts"])
def get_podcast(podcast_id: str, catalog_client: ListenNotesAPIClient = Depends(get_catalog_client)):
    return catalog_client.get_podcast(podcast_id)
