from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
from contextlib import asynccontextmanager

from backend.config import Config
from backend.core.ai_settings import AISettingsStore
from backend.core.llm import TextGenerationClient
from backend.core.mongodb_client import MongoDBClient
from backend.core.quiz_evaluator import QuizEvaluator
from backend.api import admin, community, quiz


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


mongodb_client = None

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup"""
    global mongodb_client

    try:
        # Validate configuration
        Config.validate_config()

        # Initialize components
        mongodb_client = MongoDBClient()
        llm_client = TextGenerationClient()
        settings_store = AISettingsStore(mongodb_client)
        quiz_evaluator = QuizEvaluator(llm_client, settings_store)

        # Set dependencies for routers
        quiz.set_dependencies(mongodb_client, llm_client, quiz_evaluator)
        community.set_dependencies(mongodb_client)
        admin.set_dependencies(mongodb_client, settings_store, llm_client)

        logger.info("Application initialized successfully")

    except Exception as e:
        logger.error(f"Initialization failed: {e}")
        raise e

    yield

    # Cleanup on shutdown
    if mongodb_client:
        mongodb_client.client.close()
    logger.info("Application shutting down")

# Create FastAPI app
app = FastAPI(
    title="QuizHub API",
    description="Categorized trivia quizzes, community submissions and AI-graded answers",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(quiz.router, prefix="/api", tags=["quiz"])
app.include_router(community.router, prefix="/api", tags=["community"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

@app.get("/")
async def root():
    return {"message": "QuizHub API is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": "1.0.0"}

if __name__ == "__main__":
    uvicorn.run(
        "backend.main:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=True
    )
