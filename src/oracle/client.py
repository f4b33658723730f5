"""Concurrent latest-version discovery for the declared packages.

One task per eligible package is launched and all of them are awaited
together; a failing lookup only affects its own package.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List

from common.logging_utils import Timer, extra_context, is_debug_enabled
from config.options import EffectiveOptions
from config.package import PackageSpec, RegistrySource
from errors import VersionLookupError

from .base import LookupResult, VersionOracle

logger = logging.getLogger(__name__)


def eligible_specs(specs: Iterable[PackageSpec], options: EffectiveOptions) -> List[PackageSpec]:
    """Registry-sourced specs whose version check is not skipped."""
    return [
        spec
        for spec in specs
        if isinstance(spec.source, RegistrySource)
        and not options.for_package(spec).skip_check
    ]


async def _lookup_one(oracle: VersionOracle, spec: PackageSpec) -> LookupResult:
    with Timer() as timer:
        try:
            version = await oracle.latest(spec.name, spec.constraint, spec.source)
        except VersionLookupError as exc:
            logger.warning("Could not determine the latest version of %r: %s", spec.name, exc)
            return LookupResult(name=spec.name, error=str(exc))
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning(
                "Unexpected error while looking up %r: %s", spec.name, exc, exc_info=True
            )
            return LookupResult(name=spec.name, error=f"{type(exc).__name__}: {exc}")

    if is_debug_enabled(logger):
        logger.debug(
            "Latest version found",
            extra=extra_context(
                event="version_lookup",
                component="oracle_client",
                package=spec.name,
                version=str(version),
                duration_ms=timer.duration_ms(),
            ),
        )
    return LookupResult(name=spec.name, version=version)


async def lookup_latest_all(
    specs: Iterable[PackageSpec], options: EffectiveOptions, oracle: VersionOracle
) -> Dict[str, LookupResult]:
    """Look up every eligible package concurrently.

    Returns a name-to-result mapping covering exactly the eligible specs;
    ineligible ones (git, path, skipped) are absent.
    """
    targets = eligible_specs(specs, options)
    if not targets:
        return {}

    logger.info("Fetching latest package versions...")
    results = await asyncio.gather(*(_lookup_one(oracle, spec) for spec in targets))
    return {result.name: result for result in results}


def fetch_latest_versions(
    specs: Iterable[PackageSpec], options: EffectiveOptions, oracle: VersionOracle
) -> Dict[str, LookupResult]:
    """Synchronous entry point: run the lookups and close the oracle."""

    async def _run() -> Dict[str, LookupResult]:
        async with oracle:
            return await lookup_latest_all(specs, options, oracle)

    return asyncio.run(_run())
