"""Plugin registry and discovery helpers."""

from __future__ import annotations

import importlib
import importlib.util
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import ModuleType

from media_converter.errors import PluginError
from media_converter.plugins.base import ConverterPlugin
from media_converter.plugins.builtins import FlacToMp3Plugin, HeicToJpegPlugin


class PluginRegistry:
    """Registry for conversion plugins."""

    def __init__(self) -> None:
        self._plugins: dict[str, ConverterPlugin] = {}

    def register(self, plugin: ConverterPlugin) -> None:
        """Register plugin instance by unique name.

        Parameters
        ----------
        plugin : ConverterPlugin
            Plugin instance to register. A later plugin with the same name
            replaces the earlier one.

        Raises
        ------
        PluginError
            If plugin does not provide a valid name or lacks part of the
            plugin protocol.
        """
        name = getattr(plugin, "name", "").strip()
        if not name:
            raise PluginError("Plugin must define a non-empty 'name'.")
        if not isinstance(plugin, ConverterPlugin):
            raise PluginError(
                f"Plugin '{name}' must define tools, default_template, "
                "can_handle() and convert()."
            )
        self._plugins[name] = plugin

    def names(self) -> list[str]:
        """Return registered plugin names.

        Returns
        -------
        list[str]
            Sorted list of plugin names.
        """
        return sorted(self._plugins.keys())

    def __iter__(self) -> Iterator[ConverterPlugin]:
        return iter([self._plugins[name] for name in self.names()])

    def get(self, name: str) -> ConverterPlugin:
        """Get plugin by name.

        Parameters
        ----------
        name : str
            Plugin name.

        Returns
        -------
        ConverterPlugin
            Registered plugin instance.

        Raises
        ------
        PluginError
            If plugin name is not registered.
        """
        try:
            return self._plugins[name]
        except KeyError as exc:
            raise PluginError(
                f"Unknown plugin '{name}'. Available plugins: {', '.join(self.names())}"
            ) from exc

    def load_module(self, module_or_path: str) -> None:
        """Load plugin providers from module name or file path.

        .. warning::
            This method executes code from the specified module. Only load plugins
            from trusted sources.

        Parameters
        ----------
        module_or_path : str
            Python import path or filesystem path to plugin module.
        """
        module = _import_module_or_path(module_or_path)
        _register_from_module(module, self)


def _import_module_or_path(module_or_path: str) -> ModuleType:
    """Import module by import path or filesystem path.

    Parameters
    ----------
    module_or_path : str
        Python module path or local file path. Must be from a trusted source.

    Returns
    -------
    ModuleType
        Imported module object.

    Raises
    ------
    PluginError
        If import cannot be completed.
    """
    candidate = Path(module_or_path)
    if candidate.exists():
        spec = importlib.util.spec_from_file_location(candidate.stem, candidate)
        if spec is None or spec.loader is None:
            raise PluginError(f"Unable to load plugin module from {candidate}.")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    try:
        return importlib.import_module(module_or_path)
    except Exception as exc:
        raise PluginError(
            f"Unable to import plugin module '{module_or_path}': {exc}"
        ) from exc


def _register_from_module(module: ModuleType, registry: PluginRegistry) -> None:
    """Register plugin definitions found in module.

    Parameters
    ----------
    module : ModuleType
        Imported plugin module.
    registry : PluginRegistry
        Registry that receives plugin objects.
    """
    if hasattr(module, "register_plugins"):
        module.register_plugins(registry)
        return

    plugins_obj = getattr(module, "PLUGINS", None)
    if plugins_obj is not None:
        for plugin in plugins_obj:
            registry.register(plugin)
        return

    plugin_obj = getattr(module, "PLUGIN", None)
    if plugin_obj is not None:
        registry.register(plugin_obj)
        return

    raise PluginError(
        "Plugin module must expose register_plugins(registry), PLUGINS, or PLUGIN."
    )


def create_default_registry(
    extra_modules: Iterable[str] | None = None,
) -> PluginRegistry:
    """Create default plugin registry.

    Parameters
    ----------
    extra_modules : Iterable[str] | None, optional
        Additional plugin modules to load.

    Returns
    -------
    PluginRegistry
        Registry with built-in and external plugins.
    """
    registry = PluginRegistry()
    registry.register(FlacToMp3Plugin())
    registry.register(HeicToJpegPlugin())
    for module in extra_modules or []:
        registry.load_module(module)
    return registry
