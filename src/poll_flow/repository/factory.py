"""Backend factory."""

from dataclasses import dataclass, field

from ..config.settings import Settings
from .base import SurveyRemote, SurveySink, SurveySource
from .composite import CompositeSurveySource
from .local import LocalSurveySink, LocalSurveySource
from .memory import ConsoleDebugRemote, InMemorySurveySink, InMemorySurveySource
from .supabase import SupabaseClientManager, SupabaseSurveyRemote, SupabaseSurveySource


@dataclass
class Backends:
    """Collaborators wired from settings."""
    source: SurveySource
    sink: SurveySink
    remotes: list[SurveyRemote] = field(default_factory=list)
    memory_source: InMemorySurveySource = field(default_factory=InMemorySurveySource)


def create_backends(settings: Settings) -> Backends:
    """Create backends from settings.

    Args:
        settings: Application settings

    Returns:
        Backends with a composite source (in-memory first, then local files or
        Supabase when configured), a sink and the remote targets.

    Raises:
        ValueError: If the storage backend is unknown
    """
    backend = settings.storage.backend
    memory_source = InMemorySurveySource()
    sources: list[SurveySource] = [memory_source]
    remotes: list[SurveyRemote] = []

    if backend == "memory":
        sink: SurveySink = InMemorySurveySink()
    elif backend == "local":
        sources.append(LocalSurveySource(settings.storage.data_path))
        sink = LocalSurveySink(settings.storage.data_path)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    if settings.supabase.is_configured:
        client_manager = SupabaseClientManager(settings.supabase.url, settings.supabase.key)
        sources.append(SupabaseSurveySource(client_manager, settings.supabase.surveys_table))
        remotes.append(SupabaseSurveyRemote(
            client_manager,
            table=settings.supabase.responses_table,
            surveys_table=settings.supabase.surveys_table,
        ))

    if settings.remote.console_debug:
        remotes.append(ConsoleDebugRemote())

    return Backends(
        source=CompositeSurveySource(sources),
        sink=sink,
        remotes=remotes,
        memory_source=memory_source,
    )
