import logging
from typing import NoReturn, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from pet_brain.core.env import configure_logging, load_dotenv_if_present
from pet_brain.core.errors import PetBrainError, status_code_for
from pet_brain.gateway import CompletionClient, GatewayConfig
from pet_brain.vision import ClassifierConfig, ImageClassifier

logger = logging.getLogger(__name__)


class CompletionPrompt(BaseModel):
    prompt: str


def get_classifier(request: Request) -> ImageClassifier:
    return request.app.state.classifier


def get_gateway(request: Request) -> CompletionClient:
    return request.app.state.gateway


def _raise_http(exc: PetBrainError) -> NoReturn:
    status = status_code_for(exc)
    if status >= 500:
        logger.error("Request failed: %s", exc)
    raise HTTPException(status_code=status, detail=str(exc)) from exc


def create_app(
    classifier: Optional[ImageClassifier] = None,
    gateway: Optional[CompletionClient] = None,
) -> FastAPI:
    """
    Build the API with its collaborators.

    Missing collaborators are built from the environment once, here; an
    invalid gateway configuration fails startup rather than the first request.
    """
    if classifier is None or gateway is None:
        load_dotenv_if_present()
        configure_logging()
    if classifier is None:
        classifier = ImageClassifier.from_config(ClassifierConfig.from_env())
    if gateway is None:
        gateway = CompletionClient(GatewayConfig.from_env())

    app = FastAPI(title="Pet Brain API")
    app.state.classifier = classifier
    app.state.gateway = gateway

    @app.get("/health")
    def health(classifier: ImageClassifier = Depends(get_classifier)) -> dict:
        return {"status": "ok", "model_loaded": classifier.loaded}

    @app.post("/model")
    def upload_model(
        file: UploadFile = File(...), classifier: ImageClassifier = Depends(get_classifier)
    ) -> dict:
        try:
            classifier.load_model(file.file.read())
        except PetBrainError as exc:
            _raise_http(exc)
        return {"status": "loaded"}

    @app.post("/classify")
    def classify(
        file: UploadFile = File(...), classifier: ImageClassifier = Depends(get_classifier)
    ) -> dict:
        try:
            results = classifier.classify(file.file.read())
        except PetBrainError as exc:
            _raise_http(exc)
        return {"classifications": [result.model_dump() for result in results]}

    @app.post("/complete")
    async def complete(
        req: CompletionPrompt, gateway: CompletionClient = Depends(get_gateway)
    ) -> dict:
        return {"reply": await gateway.complete(req.prompt)}

    @app.post("/analyze")
    async def analyze(
        file: UploadFile = File(...),
        classifier: ImageClassifier = Depends(get_classifier),
        gateway: CompletionClient = Depends(get_gateway),
    ) -> dict:
        data = await file.read()
        try:
            results = await run_in_threadpool(classifier.classify, data)
        except PetBrainError as exc:
            _raise_http(exc)
        reply = await gateway.complete(results[0].label)
        return {
            "classifications": [result.model_dump() for result in results],
            "reply": reply,
        }

    return app
