from fastapi import APIRouter

from medaieval.api.answers import router as answers_router
from medaieval.api.dashboard import router as dashboard_router
from medaieval.api.feedback import router as feedback_router
from medaieval.api.providers import router as providers_router
from medaieval.api.questions import router as questions_router

router = APIRouter(prefix="/api")
router.include_router(questions_router)
router.include_router(answers_router)
router.include_router(feedback_router)
router.include_router(dashboard_router)
router.include_router(providers_router)
