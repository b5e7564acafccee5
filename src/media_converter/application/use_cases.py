"""Application use-cases orchestrating conversion workflows."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from media_converter.application.options import BatchOptions
from media_converter.application.ports import FailureReporter
from media_converter.application.results import BatchResult
from media_converter.converter.cancellation import SignalCancellation
from media_converter.converter.core import WORKER_COUNT, WorkUnit
from media_converter.converter.pool import WorkerPool
from media_converter.converter.walker import WalkDriver, discover
from media_converter.converter.workqueue import CompletionCounter, WorkQueue
from media_converter.errors import ConversionError
from media_converter.infrastructure.processes import CancelToken, require_tools
from media_converter.infrastructure.reporting import StderrFailureReporter
from media_converter.plugins.base import ConverterPlugin
from media_converter.plugins.registry import PluginRegistry, create_default_registry
from media_converter.schemas import BatchConversionConfig
from media_converter.template import PathTemplate

logger = logging.getLogger(__name__)

# Wait granularity of the main thread, so signal handlers run promptly.
POLL_INTERVAL = 0.1


def convert_directory(
    *,
    root: Path,
    plugin_name: str,
    options: BatchOptions,
    plugin_modules: Iterable[str] | None = None,
    registry: PluginRegistry | None = None,
    reporter: FailureReporter | None = None,
) -> BatchResult:
    """Use-case: convert every stale supported file below ``root``.

    Raises
    ------
    ConversionError
        For invalid parameters, a missing tool, a malformed template or a
        walk failure.
    PluginError
        If the plugin cannot be found or loaded.
    """
    try:
        config = BatchConversionConfig(
            root=root,
            plugin_name=plugin_name,
            output_template=options.output_template,
            recurse=options.recurse,
        )
    except ValidationError as exc:
        raise ConversionError(f"Invalid batch conversion parameters: {exc}") from exc

    registry = registry or create_default_registry(extra_modules=plugin_modules)
    plugin = registry.get(config.plugin_name)
    require_tools(plugin.tools)
    template = PathTemplate(config.output_template or plugin.default_template)

    return run_batch(
        root=config.root,
        plugin=plugin,
        template=template,
        recurse=config.recurse,
        reporter=reporter or StderrFailureReporter(),
    )


def run_batch(
    *,
    root: Path,
    plugin: ConverterPlugin,
    template: PathTemplate,
    recurse: bool,
    reporter: FailureReporter,
    token: CancelToken | None = None,
) -> BatchResult:
    """Walk ``root`` and convert through a pool of workers until drained.

    SIGINT/SIGTERM cancel the run: running processes are asked to
    terminate, discovery stops, and the call still waits for every unit
    already dispatched to report before returning.

    Raises
    ------
    WalkError
        If the walk fails. In-flight work is cancelled and not waited on.
    """
    token = token or CancelToken()
    queue: WorkQueue[WorkUnit] = WorkQueue(WORKER_COUNT)
    counter = CompletionCounter()
    pool = WorkerPool(queue, counter, plugin.convert, reporter, token)
    units = discover(
        root,
        can_handle=plugin.can_handle,
        template=template,
        recurse=recurse,
        token=token,
    )
    driver = WalkDriver(units, queue, counter)

    with SignalCancellation(token) as controller:
        pool.start()
        driver.start()
        while driver.is_alive():
            driver.join(POLL_INTERVAL)
        if driver.error is not None:
            token.cancel()
            raise driver.error
        while not counter.wait(POLL_INTERVAL):
            pass
        pool.join()

    interrupted = controller.received is not None or token.cancelled
    if interrupted:
        logger.warning("conversion of %s interrupted", root)
    return BatchResult(queued=driver.queued, failed=pool.failed, interrupted=interrupted)
