"""
Directive files: custom directives declared in YAML

Lets the command line register custom directives without writing Python.
A directive file is a YAML mapping of directive name to PHP template,
where %s marks the spot for the directive's expression:

    # directives.yaml
    upper: "<?= strtoupper(%s); ?>"
    money: "<?= number_format(%s, 2); ?>"
    now: "<?= date('Y-m-d'); ?>"
"""

from pathlib import Path
from typing import Any, Callable, Dict, Union

import yaml

from ..models.directives import EXPRESSION_SLOT
from .directives import DIRECTIVE_NAME
from .log import LOG


class DirectiveFileError(Exception):
    """Raised when a directive file cannot be loaded or is malformed"""
    pass


def handler_make(template: str) -> Callable[[str], str]:
    """
    Build a directive handler from a PHP template

    Example:
        >>> handler_make("<?= strtoupper(%s); ?>")("$name")
        '<?= strtoupper($name); ?>'
    """
    return lambda expression: template.replace(EXPRESSION_SLOT, expression)


class DirectiveFile:
    """
    A YAML file of custom directive templates
    """

    def __init__(self, path: Union[str, Path]):
        """
        Load a directive file.

        Args:
            path: Path to the YAML file

        Raises:
            DirectiveFileError: If the file is missing, is not valid YAML,
                                or does not map names to template strings
        """
        self.path = Path(path)

        if not self.path.exists():
            raise DirectiveFileError(f"Directive file not found: {self.path}")

        self.directives: Dict[str, str] = self._entries_validate(self._yaml_load())

    def _yaml_load(self) -> Any:
        """Load and parse the YAML file"""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise DirectiveFileError(f"Failed to parse {self.path.name}: {e}")
        except OSError as e:
            raise DirectiveFileError(f"Failed to load {self.path.name}: {e}")

    def _entries_validate(self, data: Any) -> Dict[str, str]:
        """Check that data maps directive names to template strings"""
        if data is None:
            return {}

        if not isinstance(data, dict):
            raise DirectiveFileError(
                f"{self.path.name}: expected a mapping of directive name to template, "
                f"got {type(data).__name__}"
            )

        entries: Dict[str, str] = {}
        for name, template in data.items():
            if not isinstance(name, str) or not DIRECTIVE_NAME.fullmatch(name):
                raise DirectiveFileError(f"{self.path.name}: invalid directive name '{name}'")
            if not isinstance(template, str):
                raise DirectiveFileError(
                    f"{self.path.name}: template for @{name} must be a string"
                )
            entries[name] = template

        return entries

    def registerInto(self, compiler: Any) -> int:
        """
        Register every directive in this file with a compiler.

        Args:
            compiler: BladeCompiler (or DirectiveRegistry) receiving the directives

        Returns:
            Number of directives registered
        """
        for name, template in self.directives.items():
            compiler.directive_register(name, handler_make(template))

        LOG(f"Registered {len(self.directives)} directive(s) from {self.path}", level=2)
        return len(self.directives)

    def __len__(self) -> int:
        return len(self.directives)

    def __repr__(self) -> str:
        return f"DirectiveFile(path='{self.path}', directives={len(self.directives)})"
