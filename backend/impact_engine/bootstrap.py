"""
Engine entry point for host applications.

``create_lca_service`` configures logging and builds a ``ProductLCAService``
from settings: engine defaults and the factor database are loaded from their
override paths when set, otherwise from the bundled YAML.
"""

from impact_engine.core.config import Settings, get_settings
from impact_engine.core.logging import configure_logging, get_logger
from impact_engine.modules.allocation.lookup import SnapshotLookup
from impact_engine.modules.defaults.loader import load_engine_defaults
from impact_engine.modules.lca.factors.loader import FactorDatabase
from impact_engine.modules.lca.service import ProductLCAService

logger = get_logger(__name__)


def create_lca_service(
    snapshot_lookup: SnapshotLookup | None = None,
    *,
    settings: Settings | None = None,
) -> ProductLCAService:
    """
    Service factory function.

    Configures logging before anything is loaded so that loader warnings
    are rendered for the configured environment.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    defaults = load_engine_defaults(settings.engine_defaults_path or None)
    factors = FactorDatabase(settings.factor_database_path or None)

    logger.info(
        "impact_engine_ready",
        defaults_version=defaults.version,
        factor_database_version=factors.version,
        factor_count=len(factors.list_materials()),
    )
    return ProductLCAService(
        factors,
        snapshot_lookup,
        defaults=defaults,
        bands=settings.data_quality_bands,
    )
