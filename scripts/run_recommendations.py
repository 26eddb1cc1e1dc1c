# scripts/run_recommendations.py

import asyncio
import logging
import os
import sys
from dotenv import load_dotenv

# Adjust the path to import from the podrec package
# This assumes the script is run from the project root directory
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from podrec.api.exceptions import APIClientError
from podrec.api.listennotes_client import ListenNotesAPIClient
from podrec.api.embedding_client import HuggingFaceEmbeddingClient
from podrec.config import get_settings
from podrec.services.candidate_service import CandidateService
from podrec.services.recommendation_service import RecommendationService
from podrec.services.result_standardizer import standardize_favorites
from podrec.services.similarity_service import SimilarityEngine

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

async def run(podcast_ids):
    settings = get_settings()
    catalog = ListenNotesAPIClient(settings)
    engine = SimilarityEngine(HuggingFaceEmbeddingClient(settings), settings=settings)

    raw_favorites = []
    for podcast_id in podcast_ids:
        try:
            raw_favorites.append(catalog.get_podcast(podcast_id))
        except APIClientError as e:
            logger.error(f"Could not fetch favorite {podcast_id}: {e}")

    favorites = standardize_favorites(raw_favorites)
    if not favorites:
        logger.error("No favorites could be loaded. Exiting.")
        return

    candidates = await CandidateService(catalog, settings=settings).get_candidate_podcasts(favorites)
    recommendations = await RecommendationService(engine, settings=settings).generate_recommendations(favorites, candidates)

    print(f"\n--- {len(recommendations)} recommendations for {', '.join(f.title for f in favorites)} ---")
    for i, rec in enumerate(recommendations, start=1):
        print(f"{i}. {rec.podcast.title} ({rec.match_percent}%)")
        print(f"   {rec.reason}")

def main():
    """Runs the full recommendation pipeline for Listen Notes podcast ids given on the command line."""
    load_dotenv()
    if len(sys.argv) < 2:
        print("Usage: python scripts/run_recommendations.py <listennotes_podcast_id> [...]")
        sys.exit(1)

    logger.info("--- Starting Recommendation Run ---")
    try:
        asyncio.run(run(sys.argv[1:]))
    except APIClientError as e:
        logger.error(f"API client error: {e}")
    finally:
        logger.info("--- Recommendation Run Finished ---")

if __name__ == "__main__":
    main()
