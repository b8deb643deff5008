from impact_engine.modules.lca.factors.loader import FactorDatabase, FactorLookup

__all__ = ["FactorDatabase", "FactorLookup"]
