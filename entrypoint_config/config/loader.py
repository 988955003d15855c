"""
Entry point loader with file reading and validation.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ..const import NAME_KEY, TLS_ACME_KEY
from ..logging import get_logger
from .parser import FlatConfig, flatten
from .schema import EntryPoints, ListenerKey, MissingFieldError, ResolvedConfig


logger = get_logger("config.loader")

# Every canonical key the schema recognizes
KNOWN_KEYS = sorted(key.value for key in ListenerKey)


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


@dataclass
class LoadedExpression:
    """An expression as it was read, kept for validation."""
    source: str  # "<string>", "<string>#2" or "path:line"
    flat: FlatConfig

    @property
    def name(self) -> str | None:
        return self.flat.get_value(NAME_KEY)


class ConfigLoader:
    """
    Loads entry point expressions from strings or files.

    Usage:
        loader = ConfigLoader()
        entrypoints = loader.load_file("/etc/proxy/entrypoints.conf")
        # or
        entrypoints = loader.load_string("Name:http Address::80")
    """

    COMMENT_PREFIX = "#"

    def __init__(self):
        self.last_expressions: list[LoadedExpression] = []

    def _add(self, entrypoints: EntryPoints, expression: str, source: str) -> None:
        flat = flatten(expression)
        name = flat.get(NAME_KEY)
        if name is not None and name in entrypoints:
            logger.warning(f"{source}: entry point '{name}' is defined again and replaces the previous one")
        try:
            entrypoints.set_flat(flat)
        except MissingFieldError as e:
            raise ConfigError(f"{source}: {e}") from e
        self.last_expressions.append(LoadedExpression(source=source, flat=flat))

    def load_expressions(
        self,
        expressions: Iterable[str],
        entrypoints: EntryPoints | None = None,
        source: str = "<string>",
    ) -> EntryPoints:
        """
        Load several expressions into one collection.

        Args:
            expressions: Entry point expressions
            entrypoints: Collection to fill (a new one if None)
            source: Label used in error messages

        Returns:
            The filled EntryPoints collection

        Raises:
            ConfigError: If an expression cannot be mapped
        """
        # A collection passed in keeps accumulating expressions for validate()
        if entrypoints is None:
            entrypoints = EntryPoints()
            self.last_expressions = []

        expressions = list(expressions)
        for index, expression in enumerate(expressions, start=1):
            label = source if len(expressions) == 1 else f"{source}#{index}"
            self._add(entrypoints, expression, label)

        logger.info(f"Loaded {len(expressions)} entry point expression(s) from {source}")
        return entrypoints

    def load_string(self, expression: str, source: str = "<string>") -> EntryPoints:
        """
        Load a single expression.

        Raises:
            ConfigError: If the expression has no name
        """
        return self.load_expressions([expression], source=source)

    def load_file(self, path: str | Path, entrypoints: EntryPoints | None = None) -> EntryPoints:
        """
        Load expressions from a file, one per line.

        Blank lines and lines starting with '#' are skipped.

        Args:
            path: Path to the expressions file
            entrypoints: Collection to fill (a new one if None)

        Returns:
            The filled EntryPoints collection

        Raises:
            ConfigError: If the file cannot be read or an expression is invalid
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.is_file():
            raise ConfigError(f"Not a file: {path}")

        try:
            lines = path.read_text().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to read configuration: {e}") from e

        # A collection passed in keeps accumulating expressions for validate()
        if entrypoints is None:
            entrypoints = EntryPoints()
            self.last_expressions = []

        count = 0
        for lineno, line in enumerate(lines, start=1):
            expression = line.strip()
            if not expression or expression.startswith(self.COMMENT_PREFIX):
                continue
            self._add(entrypoints, expression, f"{path}:{lineno}")
            count += 1

        logger.info(f"Loaded {count} entry point expression(s) from {path}")
        return entrypoints

    def load(self, path: str | Path) -> EntryPoints:
        """Load a fresh collection from a file (shorthand for load_file)."""
        return self.load_file(path)

    def validate(self, entrypoints: EntryPoints) -> list[str]:
        """
        Validate entry points and return list of warnings.

        The mapping itself never fails on these; they point at settings that
        are probably mistakes.

        Args:
            entrypoints: Entry points to validate

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []

        # Keys are only known for expressions that went through this loader
        for loaded in self.last_expressions:
            resolved = ResolvedConfig.from_flat(loaded.flat)
            for key in resolved.unknown:
                warnings.append(f"Unknown key '{key}' in {loaded.source}")
            if loaded.name == "":
                warnings.append(f"Empty entry point name in {loaded.source}")

        # Later expressions replace earlier ones with the same name
        acme_by_name = {
            loaded.name: TLS_ACME_KEY in loaded.flat for loaded in self.last_expressions
        }

        for name, config in entrypoints.items():
            if not config.address:
                warnings.append(f"Entry point '{name}' has no address")

            if config.tls is not None:
                if not config.tls.certificates and not acme_by_name.get(name, False):
                    warnings.append(
                        f"Entry point '{name}' enables TLS without certificates or automatic provisioning"
                    )
                for cert in config.tls.certificates:
                    if not cert.cert_file or not cert.key_file:
                        warnings.append(f"Entry point '{name}' has an incomplete certificate/key pair")

            redirect = config.redirect
            if redirect is not None:
                if not redirect.entry_point and not redirect.regex:
                    warnings.append(f"Entry point '{name}' redirect has neither entry point nor regex")
                elif redirect.regex and not redirect.replacement:
                    warnings.append(f"Entry point '{name}' redirect regex has no replacement")
                if redirect.entry_point and redirect.entry_point not in entrypoints:
                    warnings.append(
                        f"Entry point '{name}' redirects to unknown entry point '{redirect.entry_point}'"
                    )
                elif redirect.entry_point == name:
                    warnings.append(f"Entry point '{name}' redirects to itself")

            auth = config.auth
            if auth is not None and auth.forward is not None and not auth.forward.address:
                warnings.append(f"Entry point '{name}' forward authentication has no address")

        return warnings


def load_config(path: str | Path) -> EntryPoints:
    """
    Convenience function to load entry points from a file.

    Args:
        path: Path to the expressions file

    Returns:
        EntryPoints collection
    """
    loader = ConfigLoader()
    return loader.load_file(path)

