# tests/plugins/test_descriptor.py
"""Tests for PluginDescriptor classification and format configuration."""

from typing import Any

import pytest

from cdapio.contracts.enums import PluginKind, PluginType
from cdapio.contracts.errors import (
    ConfigurationMismatchError,
    MissingConfigurationError,
    UnsupportedOperationError,
)
from cdapio.plugins.context import BatchSourceContext
from cdapio.plugins.descriptor import (
    INPUT_FORMAT_CLASS,
    INPUT_KEY_CLASS,
    INPUT_VALUE_CLASS,
    OUTPUT_DIR,
    OUTPUT_FORMAT_CLASS,
    OUTPUT_KEY_CLASS,
    OUTPUT_VALUE_CLASS,
    PluginDescriptor,
)
from tests.helpers.hosted_plugins import (
    ContactConfig,
    TextBatchSource,
    TextInputFormat,
    TextInputFormatProvider,
    TextSinkConfig,
    TextSourceConfig,
    TickerConfig,
    TickerStreamingSource,
)


class TestClassification:
    """Kind is fixed by the constructor used."""

    def test_batch_is_bounded(self, source_descriptor: PluginDescriptor) -> None:
        assert source_descriptor.kind is PluginKind.BOUNDED
        assert not source_descriptor.is_unbounded
        assert source_descriptor.plugin_type is PluginType.BATCH_SOURCE

    def test_streaming_is_unbounded(self, streaming_descriptor: PluginDescriptor) -> None:
        assert streaming_descriptor.kind is PluginKind.UNBOUNDED
        assert streaming_descriptor.is_unbounded

    @pytest.mark.parametrize("config", [TextSourceConfig(path="/a"), TickerConfig(), ContactConfig(name="x", age=1)])
    def test_kind_unaffected_by_config(
        self,
        source_descriptor: PluginDescriptor,
        streaming_descriptor: PluginDescriptor,
        config: Any,
    ) -> None:
        source_descriptor.with_config(config)
        streaming_descriptor.with_config(config)

        assert source_descriptor.kind is PluginKind.BOUNDED
        assert streaming_descriptor.kind is PluginKind.UNBOUNDED

    def test_kind_is_read_only(self, source_descriptor: PluginDescriptor) -> None:
        with pytest.raises(AttributeError):
            source_descriptor.kind = PluginKind.UNBOUNDED  # type: ignore[misc]

    def test_create_batch_rejects_streaming_plugin(self) -> None:
        with pytest.raises(ConfigurationMismatchError, match="create_streaming"):
            PluginDescriptor.create_batch(TickerStreamingSource, TextInputFormat, TextInputFormatProvider)

    def test_create_streaming_rejects_batch_plugin(self) -> None:
        with pytest.raises(ConfigurationMismatchError, match="create_batch"):
            PluginDescriptor.create_streaming(TextBatchSource)

    def test_rejects_plugin_without_type(self) -> None:
        class Untyped:
            pass

        with pytest.raises(ConfigurationMismatchError, match="plugin_type"):
            PluginDescriptor.create_batch(Untyped, TextInputFormat, TextInputFormatProvider)

    def test_rejects_unknown_plugin_type(self) -> None:
        class Odd:
            plugin_type = "sparkcompute"

        with pytest.raises(ConfigurationMismatchError, match="sparkcompute"):
            PluginDescriptor.create_batch(Odd, TextInputFormat, TextInputFormatProvider)

    def test_streaming_requires_receiver_class(self) -> None:
        class NoReceiver:
            plugin_type = PluginType.STREAMING_SOURCE

        with pytest.raises(ConfigurationMismatchError, match="receiver_class"):
            PluginDescriptor.create_streaming(NoReceiver)


class TestConfig:
    def test_config_absent(self, source_descriptor: PluginDescriptor) -> None:
        with pytest.raises(MissingConfigurationError) as exc_info:
            _ = source_descriptor.config

        assert exc_info.value.field == "plugin_config"

    def test_with_config_is_fluent(self, source_descriptor: PluginDescriptor) -> None:
        config = TextSourceConfig(path="/in")

        assert source_descriptor.with_config(config) is source_descriptor
        assert source_descriptor.config is config

    def test_with_config_none(self, source_descriptor: PluginDescriptor) -> None:
        with pytest.raises(MissingConfigurationError):
            source_descriptor.with_config(None)  # type: ignore[arg-type]


class TestFormatConfiguration:
    def test_source_keys(self, source_descriptor: PluginDescriptor) -> None:
        source_descriptor.with_config(TextSourceConfig(path="/in")).with_format_configuration(str, str).prepare_run()

        conf = source_descriptor.format_configuration
        assert conf[INPUT_FORMAT_CLASS] is TextInputFormat
        assert conf[INPUT_KEY_CLASS] is str
        assert conf[INPUT_VALUE_CLASS] is str
        assert conf["text.input.path"] == "/in"

    def test_sink_keys(self, sink_descriptor: PluginDescriptor) -> None:
        sink_descriptor.with_config(TextSinkConfig(output_dir="/out")).with_format_configuration(str, str).prepare_run()

        conf = sink_descriptor.format_configuration
        assert conf[OUTPUT_FORMAT_CLASS].__name__ == "TextOutputFormat"
        assert conf[OUTPUT_KEY_CLASS] is str
        assert conf[OUTPUT_VALUE_CLASS] is str
        assert conf[OUTPUT_DIR] == "/out"
        assert str(sink_descriptor.output_dir()) == "/out"

    def test_key_type_mismatch(self, source_descriptor: PluginDescriptor) -> None:
        source_descriptor.with_config(TextSourceConfig(path="/in"))

        with pytest.raises(ConfigurationMismatchError, match="key type int"):
            source_descriptor.with_format_configuration(int, str)

    def test_value_type_mismatch(self, source_descriptor: PluginDescriptor) -> None:
        with pytest.raises(ConfigurationMismatchError, match="value type bytes"):
            source_descriptor.with_format_configuration(str, bytes)

    def test_subclass_witness_accepted(self, source_descriptor: PluginDescriptor) -> None:
        class Name(str):
            pass

        source_descriptor.with_config(TextSourceConfig(path="/in")).with_format_configuration(Name, str).prepare_run()

        assert source_descriptor.format_configuration[INPUT_KEY_CLASS] is Name

    def test_undeclared_format_types_accept_any_witness(self) -> None:
        class LooseFormat:
            pass

        class LooseProvider:
            format_configuration: dict[str, str] = {}

        class LooseSource:
            plugin_type = PluginType.BATCH_SOURCE

            def __init__(self, config: Any) -> None:
                pass

            def prepare_run(self, context: BatchSourceContext) -> None:
                context.set_input(LooseProvider())

        descriptor = PluginDescriptor.create_batch(LooseSource, LooseFormat, LooseProvider)
        descriptor.with_config(ContactConfig(name="a", age=1)).with_format_configuration(int, bytes).prepare_run()

        assert descriptor.format_configuration[INPUT_VALUE_CLASS] is bytes

    def test_not_derived_yet(self, source_descriptor: PluginDescriptor) -> None:
        with pytest.raises(MissingConfigurationError) as exc_info:
            _ = source_descriptor.format_configuration

        assert exc_info.value.field == "format_configuration"

    def test_prepare_run_requires_format_configuration(self, source_descriptor: PluginDescriptor) -> None:
        source_descriptor.with_config(TextSourceConfig(path="/in"))

        with pytest.raises(MissingConfigurationError):
            source_descriptor.prepare_run()

    def test_prepare_run_requires_config(self, source_descriptor: PluginDescriptor) -> None:
        source_descriptor.with_format_configuration(str, str)

        with pytest.raises(MissingConfigurationError) as exc_info:
            source_descriptor.prepare_run()

        assert exc_info.value.field == "plugin_config"

    def test_base_keys_not_visible_before_prepare_run(self, source_descriptor: PluginDescriptor) -> None:
        source_descriptor.with_format_configuration(str, str)

        with pytest.raises(MissingConfigurationError):
            _ = source_descriptor.format_configuration

    def test_view_is_read_only(self, source_descriptor: PluginDescriptor) -> None:
        source_descriptor.with_config(TextSourceConfig(path="/in")).with_format_configuration(str, str).prepare_run()
        conf = source_descriptor.format_configuration

        with pytest.raises(TypeError):
            conf["key.class"] = int  # type: ignore[index]

    def test_unbounded_has_no_format_configuration(self, streaming_descriptor: PluginDescriptor) -> None:
        with pytest.raises(UnsupportedOperationError):
            streaming_descriptor.with_format_configuration(str, dict)

        with pytest.raises(UnsupportedOperationError):
            streaming_descriptor.prepare_run()

    def test_rederived_on_every_call(self, source_descriptor: PluginDescriptor) -> None:
        """Each derivation runs the plugin's prepare_run() from scratch."""
        before = TextBatchSource.instances
        source_descriptor.with_config(TextSourceConfig(path="/first")).with_format_configuration(str, str).prepare_run()
        source_descriptor.with_config(TextSourceConfig(path="/second")).with_format_configuration(str, str).prepare_run()

        assert TextBatchSource.instances == before + 2
        assert source_descriptor.format_configuration["text.input.path"] == "/second"

    def test_descriptors_do_not_share_state(self) -> None:
        first = PluginDescriptor.create_batch(TextBatchSource, TextInputFormat, TextInputFormatProvider)
        second = PluginDescriptor.create_batch(TextBatchSource, TextInputFormat, TextInputFormatProvider)

        first.with_config(TextSourceConfig(path="/first")).with_format_configuration(str, str).prepare_run()

        with pytest.raises(MissingConfigurationError):
            _ = second.format_configuration


def _source_registering(provider_factory: Any) -> type:
    class Source:
        plugin_type = PluginType.BATCH_SOURCE

        def __init__(self, config: Any) -> None:
            pass

        def prepare_run(self, context: BatchSourceContext) -> None:
            provider = provider_factory()
            if provider is not None:
                context.set_input(provider)

    return Source


class TestFormatProviderChecks:
    def _prepare(self, plugin_class: type) -> PluginDescriptor:
        descriptor = PluginDescriptor.create_batch(plugin_class, TextInputFormat, TextInputFormatProvider)
        return descriptor.with_config(ContactConfig(name="a", age=1)).with_format_configuration(str, str).prepare_run()

    def test_no_provider_registered(self) -> None:
        with pytest.raises(ConfigurationMismatchError, match="did not register"):
            self._prepare(_source_registering(lambda: None))

    def test_wrong_provider_class(self) -> None:
        class OtherProvider:
            format_class_name = "whatever"
            format_configuration: dict[str, str] = {}

        with pytest.raises(ConfigurationMismatchError, match="OtherProvider"):
            self._prepare(_source_registering(OtherProvider))

    def test_provider_names_different_format(self) -> None:
        class Renamed(TextInputFormatProvider):
            format_class_name = "example.formats.CsvInputFormat"

        with pytest.raises(ConfigurationMismatchError, match="CsvInputFormat"):
            self._prepare(_source_registering(lambda: Renamed("/in")))

    def test_provider_cannot_override_reserved_keys(self) -> None:
        class Overriding(TextInputFormatProvider):
            def __init__(self) -> None:
                super().__init__("/in")
                self.format_configuration[INPUT_KEY_CLASS] = int

        with pytest.raises(ConfigurationMismatchError, match=INPUT_KEY_CLASS):
            self._prepare(_source_registering(Overriding))

    def test_failed_prepare_run_leaves_nothing_derived(self) -> None:
        class Overriding(TextInputFormatProvider):
            def __init__(self) -> None:
                super().__init__("/in")
                self.format_configuration[INPUT_KEY_CLASS] = int

        descriptor = PluginDescriptor.create_batch(_source_registering(Overriding), TextInputFormat, TextInputFormatProvider)
        descriptor.with_config(ContactConfig(name="a", age=1)).with_format_configuration(str, str)

        with pytest.raises(ConfigurationMismatchError):
            descriptor.prepare_run()

        with pytest.raises(MissingConfigurationError):
            _ = descriptor.format_configuration
        assert descriptor.output_dir() is None

    def test_rederiving_hides_previous_result_until_prepared(self, source_descriptor: PluginDescriptor) -> None:
        source_descriptor.with_config(TextSourceConfig(path="/in")).with_format_configuration(str, str).prepare_run()

        source_descriptor.with_format_configuration(str, str)

        with pytest.raises(MissingConfigurationError):
            _ = source_descriptor.format_configuration

    def test_runtime_arguments_visible_to_plugin(self) -> None:
        seen: dict[str, Any] = {}

        class Recording(TextBatchSource):
            def prepare_run(self, context: BatchSourceContext) -> None:
                seen.update(context.arguments)
                seen["stage"] = context.stage_name
                super().prepare_run(context)

        descriptor = PluginDescriptor.create_batch(Recording, TextInputFormat, TextInputFormatProvider)
        descriptor.with_config(TextSourceConfig(path="/in", reference_name="texts"))
        descriptor.with_format_configuration(str, str).prepare_run({"logical.start.time": "0"})

        assert seen == {"logical.start.time": "0", "stage": "texts"}
