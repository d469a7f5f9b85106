"""
Tests for the Periodic Scheduler and Bootstrap Registrar.

Tests cover:
- The reconciliation cycle state machine and its outcomes
- Override handling through the environment each cycle
- Failure isolation: build and publish errors never stop the loop
- Fixed-interval scheduling and graceful stop
"""

import asyncio
import json
import logging
import os
import sys
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import httpx
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from conftest import DEFAULT_URL, TEST_INSTANCE_ID, FakeRenderer
from nighthawk_adapter.modules.generation import (
    ComponentBuilder,
    ComponentGenerationError,
    GenerationMethod,
    GenerationResolver,
)
from nighthawk_adapter.modules.registration import (
    RE_REGISTER_INTERVAL,
    BootstrapRegistrar,
    CycleOutcome,
    CycleState,
    PeriodicScheduler,
)
from nighthawk_adapter.modules.registry import RegistrationError, RegistryClient


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def resolver(agent_context):
    return GenerationResolver(
        agent_context.availability,
        agent_context.build_info,
        agent_context.service.components_path,
    )


@pytest.fixture
def mock_builder():
    builder = MagicMock(spec=ComponentBuilder)
    builder.build = AsyncMock()
    return builder


@pytest.fixture
def scheduler(agent_context, resolver, mock_builder, mock_registry):
    return PeriodicScheduler(agent_context, resolver, mock_builder, mock_registry)


# =============================================================================
# Reconciliation Cycle Tests
# =============================================================================


class TestReconciliationCycle:
    """Tests for PeriodicScheduler.run_cycle()."""

    @pytest.mark.asyncio
    async def test_present_version_skips(self, scheduler, mock_builder, mock_registry):
        """Version v2 bundled, no force flag -> skip, no build, no publish."""
        outcome = await scheduler.run_cycle()

        assert outcome is CycleOutcome.SKIPPED
        mock_builder.build.assert_not_awaited()
        mock_registry.register.assert_not_awaited()
        assert scheduler.state is CycleState.IDLE

    @pytest.mark.asyncio
    async def test_force_builds_with_defaults(self, scheduler, environ, mock_builder, mock_registry):
        """Force flag set, no URL override -> compiled-in default URL and method."""
        environ["FORCE_DYNAMIC_REG"] = "true"

        outcome = await scheduler.run_cycle()

        assert outcome is CycleOutcome.REGISTERED
        config = mock_builder.build.await_args.args[0]
        assert config.version == "v2"
        assert config.url == DEFAULT_URL
        assert config.method is GenerationMethod.MANIFEST
        mock_registry.register.assert_awaited_once_with(
            TEST_INSTANCE_ID, "http://meshery.test:9081", "nighthawk.test", 10013
        )

    @pytest.mark.asyncio
    async def test_helm_override(self, scheduler, environ, mock_builder):
        """URL override with method Helm -> builder invoked with both exactly."""
        environ.update({
            "FORCE_DYNAMIC_REG": "true",
            "COMP_GEN_URL": "https://example/src",
            "COMP_GEN_METHOD": "Helm",
        })

        await scheduler.run_cycle()

        config = mock_builder.build.await_args.args[0]
        assert config.url == "https://example/src"
        assert config.method is GenerationMethod.HELM

    @pytest.mark.asyncio
    async def test_invalid_method_falls_back(self, scheduler, environ, mock_builder):
        """URL override with method Foo -> defaults for both URL and method."""
        environ.update({
            "FORCE_DYNAMIC_REG": "true",
            "COMP_GEN_URL": "https://example/src",
            "COMP_GEN_METHOD": "Foo",
        })

        await scheduler.run_cycle()

        config = mock_builder.build.await_args.args[0]
        assert config.url == DEFAULT_URL
        assert config.method is GenerationMethod.MANIFEST

    @pytest.mark.asyncio
    async def test_build_failure_skips_publish(self, scheduler, environ, mock_builder, mock_registry, caplog):
        environ["FORCE_DYNAMIC_REG"] = "true"
        mock_builder.build.side_effect = ComponentGenerationError("v2", "fetch error")

        with caplog.at_level(logging.INFO, logger="nighthawk_adapter"):
            outcome = await scheduler.run_cycle()

        assert outcome is CycleOutcome.BUILD_FAILED
        mock_registry.register.assert_not_awaited()
        assert "Failed to generate components for version v2" in caplog.text
        assert "fetch error" in caplog.text
        assert scheduler.state is CycleState.IDLE

    @pytest.mark.asyncio
    async def test_publish_failure_reported(self, scheduler, environ, mock_registry):
        environ["FORCE_DYNAMIC_REG"] = "true"
        mock_registry.register.side_effect = RegistrationError("server unreachable")

        outcome = await scheduler.run_cycle()

        assert outcome is CycleOutcome.REGISTER_FAILED
        mock_registry.register.assert_awaited_once()
        assert scheduler.last_outcome is CycleOutcome.REGISTER_FAILED

    @pytest.mark.asyncio
    async def test_state_transitions(self, scheduler, environ, mock_builder, mock_registry):
        """Test Resolving -> Generating -> Built -> Registering -> Idle."""
        environ["FORCE_DYNAMIC_REG"] = "true"
        seen = []
        mock_builder.build.side_effect = lambda config: seen.append(scheduler.state)
        mock_registry.register.side_effect = lambda *args: seen.append(scheduler.state)

        await scheduler.run_cycle()

        assert seen == [CycleState.GENERATING, CycleState.REGISTERING]
        assert scheduler.state is CycleState.IDLE
        assert scheduler.cycles_run == 1
        assert scheduler.last_cycle_at is not None

    @pytest.mark.asyncio
    async def test_real_builder_publishes_generated_set(
        self, agent_context, resolver, environ, mock_registry, caplog
    ):
        """End-to-end cycle with a real builder writing into the context's store."""
        environ["FORCE_DYNAMIC_REG"] = "true"
        scheduler = PeriodicScheduler(
            agent_context, resolver, ComponentBuilder(FakeRenderer(kinds=["Fresh"])), mock_registry
        )

        with caplog.at_level(logging.INFO, logger="nighthawk_adapter"):
            outcome = await scheduler.run_cycle()

        assert outcome is CycleOutcome.REGISTERED
        assert "Component creation completed for version v2" in caplog.messages
        assert [c.kind for c in agent_context.store.load().versions["v2"]] == ["Fresh"]

    @pytest.mark.asyncio
    async def test_publish_includes_built_and_bundled_versions(self, agent_context, resolver, environ):
        """The built version reaches the server through the store with the bundled ones."""
        environ["FORCE_DYNAMIC_REG"] = "true"
        published = []

        def handler(request):
            entity = json.loads(request.content)["entity"]
            published.append((entity["model"]["version"], entity["kind"]))
            return httpx.Response(201)

        registry = RegistryClient(agent_context.store, transport=httpx.MockTransport(handler))
        scheduler = PeriodicScheduler(
            agent_context, resolver, ComponentBuilder(FakeRenderer(kinds=["Fresh"])), registry
        )

        outcome = await scheduler.run_cycle()

        assert outcome is CycleOutcome.REGISTERED
        assert ("v2", "Fresh") in published
        assert ("v1.0.0", "NighthawkTest") in published
        assert not any(version == "v2" and kind != "Fresh" for version, kind in published)


# =============================================================================
# Scheduling Loop Tests
# =============================================================================


class TestSchedulingLoop:
    """Tests for PeriodicScheduler.run()."""

    def test_default_interval_is_one_day(self, scheduler):
        assert RE_REGISTER_INTERVAL == 86400
        assert scheduler.interval == 86400

    @pytest.mark.asyncio
    async def test_runs_immediately_then_waits_one_interval(self, scheduler, environ, mock_builder, mock_registry):
        """Build fails -> no publish; next cycle scheduled exactly one interval later."""
        environ["FORCE_DYNAMIC_REG"] = "true"
        mock_builder.build.side_effect = ComponentGenerationError("v2", "fetch error")
        scheduler._wait = AsyncMock(return_value=False)

        await scheduler.run(max_cycles=2)

        assert mock_builder.build.await_count == 2
        mock_registry.register.assert_not_awaited()
        scheduler._wait.assert_awaited_once_with(RE_REGISTER_INTERVAL)

    @pytest.mark.asyncio
    async def test_cycles_never_overlap(self, agent_context, resolver, environ, mock_registry):
        environ["FORCE_DYNAMIC_REG"] = "true"
        active = 0
        peak = 0

        async def slow_build(config):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1

        builder = MagicMock(spec=ComponentBuilder)
        builder.build = AsyncMock(side_effect=slow_build)
        scheduler = PeriodicScheduler(agent_context, resolver, builder, mock_registry, interval=0)

        await scheduler.run(max_cycles=3)

        assert builder.build.await_count == 3
        assert peak == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_does_not_stop_loop(self, scheduler, mock_builder, environ):
        environ["FORCE_DYNAMIC_REG"] = "true"
        mock_builder.build.side_effect = [RuntimeError("boom"), None]
        scheduler._wait = AsyncMock(return_value=False)

        await scheduler.run(max_cycles=2)

        assert mock_builder.build.await_count == 2
        assert scheduler.last_outcome is CycleOutcome.REGISTERED

    @pytest.mark.asyncio
    async def test_unexpected_error_outcome(self, scheduler, environ):
        environ["REGISTRY_TIMEOUT"] = "never"

        await scheduler.run(max_cycles=1)

        assert scheduler.last_outcome is CycleOutcome.ERROR
        assert scheduler.state is CycleState.IDLE

    @pytest.mark.asyncio
    async def test_stop_wakes_pending_wait(self, scheduler):
        task = asyncio.create_task(scheduler.run())
        while scheduler.cycles_run == 0:
            await asyncio.sleep(0)

        scheduler.stop()
        await asyncio.wait_for(task, timeout=1)

        assert scheduler.stopped
        assert scheduler.cycles_run == 1

    @pytest.mark.asyncio
    async def test_wait_times_out(self, scheduler):
        assert await scheduler._wait(0.01) is False

    @pytest.mark.asyncio
    async def test_no_cycle_after_stop(self, scheduler, mock_registry):
        scheduler.stop()

        await scheduler.run()

        assert scheduler.cycles_run == 0


# =============================================================================
# Bootstrap Registrar Tests
# =============================================================================


class TestBootstrapRegistrar:
    """Tests for the one-shot static registration."""

    @pytest.mark.asyncio
    async def test_registers_once(self, agent_context, mock_registry):
        bootstrap = BootstrapRegistrar(agent_context, mock_registry)

        assert await bootstrap.run() is True

        mock_registry.register.assert_awaited_once_with(
            TEST_INSTANCE_ID, "http://meshery.test:9081", "nighthawk.test", 10013
        )
        assert bootstrap.completed is True
        assert bootstrap.succeeded is True

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, agent_context, mock_registry, caplog):
        mock_registry.register.side_effect = RegistrationError("server unreachable")
        bootstrap = BootstrapRegistrar(agent_context, mock_registry)

        with caplog.at_level(logging.ERROR, logger="nighthawk_adapter"):
            assert await bootstrap.run() is False

        assert bootstrap.completed is True
        assert bootstrap.succeeded is False
        assert "server unreachable" in caplog.text

    @pytest.mark.asyncio
    async def test_malformed_server_address_is_reported(self, agent_context, caplog):
        """Test that an unusable address fails the publish instead of the task."""
        bootstrap = BootstrapRegistrar(agent_context, RegistryClient(agent_context.store))

        with patch.object(
            type(agent_context), "server_address", new_callable=PropertyMock,
            return_value="http://[::1",
        ):
            with caplog.at_level(logging.ERROR, logger="nighthawk_adapter"):
                assert await bootstrap.run() is False

        assert bootstrap.completed is True
        assert bootstrap.succeeded is False
        assert "Static component registration failed" in caplog.text
