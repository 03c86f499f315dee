"""
Compiler for Blade-style templates to PHP

Sequences every rewrite pass over a template string and owns the
compiled-file cache (paths, staleness, clearing).
"""

import hashlib
import re
from pathlib import Path
from typing import Callable, Optional, Set, Union

from ..config import appsettings
from ..models.context import CompilationContext
from .blocks import verbatim_preserve, rawBlocks_preserve, blocks_restore
from .components import components_compile
from .directives import DirectiveRegistry, inlineCode_compile
from .echos import comments_strip, echos_compile
from .structure import use_compile, extends_compile, sections_compile, yields_compile, includes_compile
from .log import LOG, template_logContext

RUNTIME_CALL = re.compile(r"\$this->([a-zA-Z_]\w*)\s*\(")


class BladeCompiler:
    """
    Compiles Blade-style templates to PHP

    Responsibilities:
    - Run the rewrite passes in their fixed order
    - Hold the custom directive registry
    - Map logical template names to compiled files in the cache directory
    - Decide when a compiled file is stale
    """

    def __init__(
        self,
        cache_path: Optional[Union[str, Path]] = None,
        registry: Optional[DirectiveRegistry] = None,
    ) -> None:
        """
        Initialize compiler

        Args:
            cache_path: Directory for compiled templates (default:
                        appsettings.cache_path); created if missing
            registry: Directive registry to use (default: a new one with
                      only the built-in directives)
        """
        self.cache_path = Path(cache_path if cache_path is not None else appsettings.cache_path)
        self.directives = registry if registry is not None else DirectiveRegistry()
        self.cacheDir_ensure()

    def cacheDir_ensure(self) -> None:
        """Create the cache directory (and parents) if it does not exist"""
        if not self.cache_path.is_dir():
            self.cache_path.mkdir(mode=0o755, parents=True, exist_ok=True)
            LOG(f"Created cache directory {self.cache_path}", level=2)

    def directive_register(self, name: str, handler: Callable[[str], str]) -> None:
        """
        Register a custom directive

        Args:
            name: Directive name, used as @name(...)
            handler: Receives the expression text, returns replacement text

        Example:
            compiler.directive_register('upper', lambda expr: f"<?= strtoupper({expr}); ?>")
        """
        self.directives.directive_register(name, handler)

    def string_compile(self, template: str, name: str = "<string>") -> str:
        """
        Compile template text to PHP

        Pass order:
            1. strip comments
            2. preserve verbatim blocks
            3. preserve raw PHP blocks
            4. @use
            5. @extends, sections, @yield, includes, component tags
            6. control-flow directives (built-in tables, then custom)
            7. inline @php(...)
            8. echoes
            9. restore preserved blocks

        Args:
            template: Template source
            name: Logical template name, for log messages

        Returns:
            PHP source

        Raises:
            UnbalancedExpressionError: If a directive has unbalanced arguments
        """
        context = CompilationContext(name=name)

        with template_logContext(context.name):
            template = comments_strip(template)
            template = verbatim_preserve(template, context)
            template = rawBlocks_preserve(template, context)

            template = use_compile(template)

            template = extends_compile(template)
            template = sections_compile(template)
            template = yields_compile(template)
            template = includes_compile(template)
            template = components_compile(template)

            template = self.directives.directives_compile(template)

            template = inlineCode_compile(template)

            template = echos_compile(template)

            template = blocks_restore(template, context)

            LOG(f"compiled to {len(template)} characters", level=3)
        return template

    def compile(
        self,
        template_path: Union[str, Path],
        compiled_path: Union[str, Path],
        name: Optional[str] = None,
    ) -> Path:
        """
        Compile a template file and write the result

        Args:
            template_path: Template source file (UTF-8)
            compiled_path: Destination for the PHP output
            name: Logical template name for log messages (default: file name)

        Returns:
            Path of the written file
        """
        template_path = Path(template_path)
        compiled_path = Path(compiled_path)

        source = template_path.read_text(encoding="utf-8")
        compiled = self.string_compile(source, name=name or template_path.name)

        compiled_path.parent.mkdir(parents=True, exist_ok=True)
        compiled_path.write_text(compiled, encoding="utf-8")
        LOG(f"Compiled {template_path} -> {compiled_path}", level=2)
        return compiled_path

    def compiledPath_get(self, name: str) -> Path:
        """
        Cache path for a logical template name

        The name has "/" and "." replaced by "_", followed by the md5 of the
        original name, so distinct names never collide.

        Example:
            "layouts.app" -> <cache>/layouts_app_<md5("layouts.app")>.php
        """
        safe_name = name.replace("/", "_").replace(".", "_")
        digest = hashlib.md5(name.encode("utf-8")).hexdigest()
        return self.cache_path / f"{safe_name}_{digest}{appsettings.compiled_extension}"

    def expired_is(self, template_path: Union[str, Path], compiled_path: Union[str, Path]) -> bool:
        """
        Check if a template needs recompiling

        True if the compiled file is missing or older than the template.
        """
        compiled_path = Path(compiled_path)
        if not compiled_path.exists():
            return True

        return Path(template_path).stat().st_mtime > compiled_path.stat().st_mtime

    def template_ensureCompiled(
        self, template_path: Union[str, Path], name: str, force: bool = False
    ) -> Path:
        """
        Compile a template into the cache unless its compiled file is fresh

        Args:
            template_path: Template source file
            name: Logical template name (decides the cache file)
            force: Recompile even if the compiled file is up to date

        Returns:
            Path of the compiled file
        """
        compiled_path = self.compiledPath_get(name)
        if force or self.expired_is(template_path, compiled_path):
            return self.compile(template_path, compiled_path, name=name)

        LOG(f"Up to date: {name}", level=2)
        return compiled_path

    def cache_clear(self) -> int:
        """
        Delete every compiled file in the cache directory

        Returns:
            Number of files deleted
        """
        removed = 0
        for compiled_file in self.cache_path.glob(f"*{appsettings.compiled_extension}"):
            if compiled_file.is_file():
                compiled_file.unlink()
                removed += 1

        LOG(f"Cleared {removed} compiled file(s) from {self.cache_path}", level=2)
        return removed

    @staticmethod
    def runtimeCalls_find(compiled: str) -> Set[str]:
        """
        Names of the $this-> methods called by compiled code

        Example:
            "<?= $this->include('a', []); ?>" -> {"include"}
        """
        return set(RUNTIME_CALL.findall(compiled))
