"""Command handlers for the telemetry_pie CLI."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping

from telemetry_pie.cli.errors import CliError
from telemetry_pie.cli.io import read_recording
from telemetry_pie.configuration import (
    PanelConfig,
    RenderOptions,
    merge_config,
    panel_defaults,
)
from telemetry_pie.exporters import exporters_registry
from telemetry_pie.logging import logging_trace
from telemetry_pie.panel import PieChartPanel
from telemetry_pie.telemetry.replay import ReplayContext, iter_render_states
from telemetry_pie.visualization.render import DEFAULT_TITLE, RenderModel, build_segments

__all__ = ["_handle_render", "_handle_replay", "parse_weights"]


logger = logging.getLogger(__name__)


def parse_weights(raw: str) -> List[float]:
    """Parse a comma separated list of weights."""

    tokens = [token.strip() for token in raw.split(",")]
    if tokens == [""]:
        return []
    weights: List[float] = []
    for token in tokens:
        try:
            weights.append(float(token))
        except ValueError:
            raise CliError(
                f"Invalid weight {token!r}; expected a number.",
                category="usage",
                context={"weights": raw},
            ) from None
    return weights


def _panel_overrides(namespace: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for attribute, key in (
        ("path", "path"),
        ("color_map", "colorMap"),
        ("color_mode", "colorMode"),
        ("title", "title"),
    ):
        value = getattr(namespace, attribute, None)
        if value is not None:
            overrides[key] = value
    if getattr(namespace, "gradient", None) is not None:
        overrides["gradient"] = list(namespace.gradient)
    if getattr(namespace, "reverse", False):
        overrides["reverse"] = True
    legends = getattr(namespace, "legends", None)
    if legends:
        overrides["legends"] = list(legends)
    return overrides


def _render_options(namespace: argparse.Namespace, config: Mapping[str, Any]) -> RenderOptions:
    try:
        options = RenderOptions.from_config(config)
        gap = getattr(namespace, "gap_angle", None)
        if gap is not None:
            options = replace(options, gap_angle=gap)
    except ValueError as exc:
        raise CliError.wrap(exc, category="usage") from exc
    return options


def _export(model: RenderModel, options: RenderOptions, fmt: str) -> str:
    exporter = exporters_registry.get(fmt)
    if exporter is None:
        raise CliError(
            f"Unknown output format '{fmt}'.",
            category="usage",
            context={"format": fmt, "available": ",".join(sorted(exporters_registry))},
        )
    return exporter(model, options)


def _handle_render(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    weights = parse_weights(namespace.weights)
    panel_config: PanelConfig = merge_config(panel_defaults(config), _panel_overrides(namespace))
    options = _render_options(namespace, config)
    segments = build_segments(weights, panel_config, options)
    model = RenderModel(
        segments=segments,
        has_data=bool(segments),
        title=panel_config.title or DEFAULT_TITLE,
    )
    logger.info(
        "Rendered weights",
        extra={"event": "cli.render", "context": {"weights": len(weights), "segments": len(segments)}},
    )
    return _export(model, options, namespace.format)


def _handle_replay(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    records = read_recording(namespace.recording)
    options = _render_options(namespace, config)
    context = ReplayContext(initial_state=_panel_overrides(namespace))
    trace = logging_trace() if namespace.trace else None
    panel = PieChartPanel(context, defaults=panel_defaults(config), options=options, trace=trace)
    try:
        ticks = context.play(iter_render_states(records))
        model = panel.model
    finally:
        panel.teardown()
    logger.info(
        "Replayed recording",
        extra={
            "event": "cli.replay",
            "context": {
                "source": str(namespace.recording),
                "records": len(records),
                "ticks": ticks,
                "topic": panel.state.topic_name,
            },
        },
    )
    return _export(model, options, namespace.format)
