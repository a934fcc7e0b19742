from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from appraisal_api.core.config import Config
from appraisal_api.database import build_engine, build_session_factory


@dataclass
class AppContext:
    """Process-wide service state, built once by the app factory."""
    settings: Config
    engine: Engine
    session_factory: sessionmaker

    @classmethod
    def from_settings(cls, settings: Config, engine: Optional[Engine] = None) -> "AppContext":
        engine = engine or build_engine(settings.database_url)
        return cls(settings=settings, engine=engine, session_factory=build_session_factory(engine))

    def close(self) -> None:
        self.engine.dispose()


def get_context(request: Request) -> AppContext:
    return request.app.state.context
