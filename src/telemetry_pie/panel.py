"""Pie chart panel adapter.

:class:`PieChartPanel` owns one reducer state and translates host callbacks
(render ticks, seeks, settings edits) into reducer actions.  All of the
work it triggers is synchronous; tearing the panel down only detaches the
render callback and drops the topic subscription.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from telemetry_pie.configuration import (
    DEFAULT_CONFIG,
    PanelConfig,
    RenderOptions,
    SettingsAction,
    apply_settings_action,
    merge_config,
)
from telemetry_pie.core.interfaces import PanelContext, TraceHook
from telemetry_pie.core.reducer import (
    Action,
    ApplyFrame,
    ReducerState,
    Seek,
    SetPath,
    initial_state,
    reduce,
)
from telemetry_pie.telemetry.events import RenderState, Subscription
from telemetry_pie.visualization.render import RenderModel, build_render_model

__all__ = ["PieChartPanel"]


logger = logging.getLogger(__name__)


class PieChartPanel:
    """Bind a :class:`PanelContext` to the stream reducer and render model."""

    def __init__(
        self,
        context: PanelContext,
        *,
        defaults: PanelConfig = DEFAULT_CONFIG,
        options: RenderOptions | None = None,
        trace: TraceHook | None = None,
        on_update: Optional[Callable[[RenderModel], None]] = None,
    ) -> None:
        self._context = context
        self._options = options or RenderOptions()
        self._trace = trace
        self._on_update = on_update
        self._config = merge_config(defaults, context.initial_state)
        self._state: ReducerState = initial_state(self._config.path)
        self._last_good: RenderModel | None = None
        self._model = RenderModel()
        self._subscribed_topic: str | None = None
        self._attached = True

        self._persist_config()
        self._sync_subscription()
        context.on_render = self._handle_render
        context.watch("currentFrame")
        context.watch("didSeek")
        self._refresh()

    @property
    def config(self) -> PanelConfig:
        return self._config

    @property
    def state(self) -> ReducerState:
        return self._state

    @property
    def model(self) -> RenderModel:
        return self._model

    @property
    def options(self) -> RenderOptions:
        return self._options

    def dispatch(self, action: Action) -> ReducerState:
        self._state = reduce(self._state, action, trace=self._trace)
        return self._state

    def _handle_render(self, render_state: RenderState, done: Callable[[], None]) -> None:
        try:
            if render_state.did_seek:
                self.dispatch(Seek())
                self._last_good = None
            if render_state.current_frame:
                self.dispatch(ApplyFrame(tuple(render_state.current_frame)))
            self._refresh()
        finally:
            done()

    def handle_settings_action(self, action: SettingsAction) -> PanelConfig:
        """Apply a settings edit and propagate it to the reducer."""

        updated = apply_settings_action(self._config, action)
        if updated == self._config:
            return self._config
        previous_path = self._config.path
        self._config = updated
        self._persist_config()
        if updated.path != previous_path:
            self.dispatch(SetPath(updated.path))
            self._sync_subscription()
        self._refresh()
        return self._config

    def set_options(self, options: RenderOptions) -> None:
        self._options = options
        self._refresh()

    def teardown(self) -> None:
        if not self._attached:
            return
        self._context.on_render = None
        self._context.unsubscribe_all()
        self._subscribed_topic = None
        self._attached = False

    def _persist_config(self) -> None:
        self._context.save_state(self._config.to_state())
        self._context.set_default_panel_title(self._config.path or None)

    def _sync_subscription(self) -> None:
        topic = self._state.topic_name
        if topic == self._subscribed_topic:
            return
        self._context.unsubscribe_all()
        if topic is not None:
            self._context.subscribe([Subscription(topic, preload=False)])
        logger.debug(
            "Updated topic subscription",
            extra={
                "event": "panel.subscription",
                "context": {"previous": self._subscribed_topic, "topic": topic},
            },
        )
        self._subscribed_topic = topic

    def _refresh(self) -> None:
        model = build_render_model(
            self._state, self._config, self._options, last_good=self._last_good
        )
        if model.error_message is None:
            self._last_good = model if model.has_data else None
        self._model = model
        if self._on_update is not None:
            self._on_update(model)
