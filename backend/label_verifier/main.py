import json
import logging
from typing import Annotated, List

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import Settings, get_settings
from .schemas import DeclaredRecord, VerificationResponse
from .services.verifier_service import VerifierService, get_verifier_service

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_app(settings: Settings | None = None) -> FastAPI:
    cfg = settings or get_settings()
    logging.basicConfig(level=cfg.log_level.upper(), format=LOG_FORMAT)

    limiter = Limiter(key_func=get_remote_address)

    app = FastAPI(title=cfg.project_name)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get(f"{cfg.api_prefix}/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(f"{cfg.api_prefix}/verify", response_model=VerificationResponse)
    @limiter.limit(cfg.verify_rate_limit)
    async def verify(
        request: Request,
        form_payload: Annotated[str, Form(...)],
        images: Annotated[List[UploadFile], File(...)],
        service: VerifierService = Depends(get_verifier_service),
    ) -> VerificationResponse:
        try:
            payload_dict = json.loads(form_payload)
        except json.JSONDecodeError as exc:
            raise HTTPException(status_code=400, detail="Invalid JSON payload") from exc
        if not isinstance(payload_dict, dict):
            raise HTTPException(status_code=400, detail="Form payload must be a JSON object")
        try:
            declared = DeclaredRecord.model_validate(payload_dict)
        except ValidationError as exc:
            raise HTTPException(
                status_code=422,
                detail=exc.errors(include_url=False, include_context=False),
            ) from exc
        return await service.verify(declared, images)

    return app


app = create_app()
