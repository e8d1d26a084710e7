from jobsync.parsers.base import BaseParser, JobRecord, parse_posted_age_days
from jobsync.parsers.topstartups import TopStartupsParser

# Parser registry: maps parser_type to parser class
PARSER_REGISTRY: dict[str, type[BaseParser]] = {
    "topstartups": TopStartupsParser,
}


def get_parser(parser_type: str, config: dict | None = None) -> BaseParser:
    """
    Get a parser instance by parser_type.

    Args:
        parser_type: The type of parser (e.g., 'topstartups')
        config: Optional parser-specific configuration (selector overrides)

    Returns:
        An instance of the appropriate parser

    Raises:
        ValueError: If parser_type is not registered

    To add a new site:
        1. Create a new file in jobsync/parsers/
        2. Implement a class that inherits from BaseParser
        3. Register it in PARSER_REGISTRY above
    """
    parser_class = PARSER_REGISTRY.get(parser_type)
    if parser_class is None:
        raise ValueError(
            f"Unknown parser_type: {parser_type}. "
            f"Available: {list(PARSER_REGISTRY.keys())}"
        )
    return parser_class(config or {})


__all__ = [
    "BaseParser",
    "JobRecord",
    "PARSER_REGISTRY",
    "TopStartupsParser",
    "get_parser",
    "parse_posted_age_days",
]
