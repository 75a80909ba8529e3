from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import os
import sys
# Add current directory to sys.path to allow absolute imports
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from api.routes import auth, chat, files, health, preview, projects, settings, templates
from database.kv_store import KeyValueStore
from services.credential_svc import CredentialService
from services.identity_svc import IdentityService
from services.llm_client import build_generation_client
from services.preview_svc import PreviewService
from services.project_svc import ProjectService
from services.template_svc import TemplateService
from services.workspace_svc import Workspace
from utils.config import AppConfig, load_config
from utils.logger import server_logger, setup_logging

APP_VERSION = "1.0.0"
SERVER_ROOT = os.path.dirname(os.path.abspath(__file__))


def create_app(config: AppConfig = None, adapter_factory=None) -> FastAPI:
    """
    Build the API app. adapter_factory() returns the generation adapter used
    for each round; by default it is built from config and the current
    credential so a key saved in settings applies to the next round.
    """
    config = config or load_config()
    if config.log_dir:
        setup_logging(config.log_dir, config.log_level)

    app = FastAPI(
        title="ExtForge API",
        description="AI browser-extension builder backend",
        version=APP_VERSION
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Storage is read once here; services write through afterwards
    store = KeyValueStore(config.data_dir)
    credentials = CredentialService(store, config_default=config.default_api_key)
    workspace = Workspace()

    app.state.server_root = SERVER_ROOT
    app.state.app_version = APP_VERSION
    app.state.config = config
    app.state.store = store
    app.state.credentials = credentials
    app.state.identity = IdentityService(store)
    app.state.projects = ProjectService(store)
    app.state.templates = TemplateService(SERVER_ROOT)
    app.state.workspace = workspace
    app.state.preview = PreviewService(workspace)
    app.state.adapter_factory = adapter_factory or (lambda: build_generation_client(config, credentials))

    # Register routers
    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(chat.router, prefix="/api/chat", tags=["Chat"])
    app.include_router(files.router, prefix="/api/files", tags=["Files"])
    app.include_router(preview.router, prefix="/api", tags=["Preview"])
    app.include_router(templates.router, prefix="/api/templates", tags=["Templates"])
    app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
    app.include_router(settings.router, prefix="/api/settings", tags=["Settings"])
    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])

    server_logger.info(f"ExtForge app created (data_dir={config.data_dir})")
    return app


def run():
    config = load_config()
    print("==================================================")
    print(f"ExtForge Server v{APP_VERSION}")
    print("==================================================")
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    run()
