from ingestion.parsers.formation_parser import FormationParser, FORMATION_RECORD

__all__ = ["FormationParser", "FORMATION_RECORD"]
