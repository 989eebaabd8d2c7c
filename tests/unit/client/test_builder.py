"""Unit tests for XmlClientConfigBuilder and ClientConfigMapper."""
import logging

import httpx
import pytest

from clientconfig.client.builder import ClientConfigMapper, XmlClientConfigBuilder
from clientconfig.config.document import ResolvedConfig, parse_document
from clientconfig.config.locator import ResourceLocator
from clientconfig.config.settings import ResolverSettings
from clientconfig.exceptions import (
    ConfigValidationError,
    CyclicImportError,
    ResourceUnavailableError,
)
from tests.fixtures.configs import client_xml, import_xml


NETWORK_XML = client_xml(
    "<network>"
    "  <cluster-members>"
    "    <address>127.0.0.1</address>"
    "    <address>127.0.0.2</address>"
    "  </cluster-members>"
    "  <smart-routing>false</smart-routing>"
    "  <redo-operation>true</redo-operation>"
    '  <socket-interceptor enabled="true">'
    "    <class-name>com.example.SocketInterceptor</class-name>"
    "    <properties>"
    '      <property name="foo">bar</property>'
    "    </properties>"
    "  </socket-interceptor>"
    "</network>"
)


@pytest.fixture
def builder_for(settings, locator):
    """Builder factory sharing the test locator and settings."""

    def _builder(source=None):
        return XmlClientConfigBuilder(source, settings=settings, locator=locator)

    return _builder


def build(xml):
    resolved = ResolvedConfig(root=parse_document(xml))
    return ClientConfigMapper().map(resolved)


# ==================== Placeholders and imports ====================

def test_property_placeholder(builder_for):
    xml = client_xml("<executor-pool-size>${executor.pool.size}</executor-pool-size>")

    config = builder_for(xml.encode()).set_properties({"executor.pool.size": "40"}).build()

    assert config.executor_pool_size == 40


def test_import_from_property_location(builder_for, write_config):
    """Should merge the imported network section into the client config."""
    path = write_config("hazelcast-client-network.xml", NETWORK_XML)
    xml = client_xml(import_xml("${config.location}"))

    config = builder_for(xml.encode()).set_properties({"config.location": str(path)}).build()

    network = config.network
    assert network.smart_routing is False
    assert network.redo_operation is True
    assert network.addresses == ["127.0.0.1", "127.0.0.2"]
    assert network.socket_interceptor.enabled is True
    assert network.socket_interceptor.class_name == "com.example.SocketInterceptor"
    assert network.socket_interceptor.properties == {"foo": "bar"}


def test_placeholder_inside_imported_document(builder_for, write_config):
    write_config(
        "network.xml",
        client_xml("<network><cluster-members><address>${ip.address}</address></cluster-members></network>"),
    )

    config = (
        builder_for(client_xml(import_xml("network.xml")).encode())
        .set_properties({"ip.address": "192.168.5.5"})
        .build()
    )

    assert config.network.addresses == ["192.168.5.5"]


def test_classpath_import(builder_for, classpath_dir):
    (classpath_dir / "hazelcast-client-c1.xml").write_text(
        client_xml("<group><name>cluster1</name><password>cluster1pass</password></group>"),
        encoding="utf-8",
    )
    xml = client_xml(import_xml("classpath:hazelcast-client-c1.xml"))

    config = builder_for(xml.encode()).set_properties({}).build()

    assert config.group.name == "cluster1"
    assert config.group.password == "cluster1pass"


def test_http_import(settings):
    def handler(request):
        return httpx.Response(200, text=NETWORK_XML)

    locator = ResourceLocator(http_client=httpx.Client(transport=httpx.MockTransport(handler)))
    xml = client_xml(import_xml("https://config.example.com/network.xml"))

    config = XmlClientConfigBuilder(xml.encode(), settings=settings, locator=locator).build()

    assert config.network.addresses == ["127.0.0.1", "127.0.0.2"]


def test_unresolved_placeholder_fails_validation(builder_for):
    """Should surface a placeholder left in a typed field as a validation error."""
    xml = client_xml("<executor-pool-size>${foo}</executor-pool-size>")

    with pytest.raises(ConfigValidationError) as exc_info:
        builder_for(xml.encode()).set_properties({}).build()

    assert "executor_pool_size" in exc_info.value.field_errors


def test_resolution_errors_propagate(builder_for, write_config):
    write_config("a.xml", client_xml(import_xml("a.xml")))

    with pytest.raises(CyclicImportError):
        builder_for(client_xml(import_xml("a.xml")).encode()).build()
    with pytest.raises(ResourceUnavailableError):
        builder_for(client_xml(import_xml("missing.xml")).encode()).build()


# ==================== Sources ====================

def test_path_and_reference_sources(builder_for, write_config):
    path = write_config("client.xml", client_xml("<executor-pool-size>8</executor-pool-size>"))

    assert builder_for(path).build().executor_pool_size == 8
    assert builder_for(str(path)).build().executor_pool_size == 8
    assert builder_for("client.xml").build().executor_pool_size == 8
    with path.open("rb") as stream:
        assert builder_for(stream).build().executor_pool_size == 8


def test_default_lookup(builder_for):
    """Should fall back to the packaged default document."""
    config = builder_for().build()

    assert config.group.name == "dev"
    assert config.group.password == "dev-pass"
    assert config.network.addresses == ["127.0.0.1"]
    assert config.executor_pool_size == 40
    assert config.load_balancer == "round-robin"


def test_default_lookup_prefers_config_location(locator, write_config):
    path = write_config("custom.xml", client_xml("<load-balancer type=\"random\"/>"))
    settings = ResolverSettings(include_environment=False, config_location=str(path))

    config = XmlClientConfigBuilder(settings=settings, locator=locator).build()

    assert config.load_balancer == "random"


def test_properties_default_to_environment(locator, monkeypatch):
    monkeypatch.setenv("CC_BUILDER_POOL", "12")
    builder = XmlClientConfigBuilder(
        client_xml("<executor-pool-size>${CC_BUILDER_POOL}</executor-pool-size>").encode(),
        settings=ResolverSettings(include_environment=True),
        locator=locator,
    )

    assert builder.properties["CC_BUILDER_POOL"] == "12"
    assert builder.build().executor_pool_size == 12


def test_set_properties_replaces_and_restores(builder_for):
    builder = builder_for(client_xml().encode())

    assert builder.set_properties({"a": "1"}) is builder
    assert dict(builder.properties) == {"a": "1"}

    builder.set_properties(None)
    assert "a" not in builder.properties


# ==================== Mapping ====================

def test_later_sections_override_scalars():
    xml = client_xml(
        "<group><name>first</name><password>p1</password></group>"
        "<group><name>second</name></group>"
        "<network><smart-routing>false</smart-routing></network>"
        "<network><smart-routing>true</smart-routing></network>"
        "<executor-pool-size>4</executor-pool-size>"
        "<executor-pool-size>8</executor-pool-size>"
    )

    config = build(xml)

    assert config.group.name == "second"
    assert config.group.password == "p1"
    assert config.network.smart_routing is True
    assert config.executor_pool_size == 8


def test_collections_accumulate():
    xml = client_xml(
        "<network><cluster-members><address>a</address></cluster-members></network>"
        "<network><cluster-members><address>b</address></cluster-members></network>"
        '<properties><property name="x">1</property><property name="y">2</property></properties>'
        '<properties><property name="y">3</property></properties>'
        "<listeners><listener>com.example.A</listener></listeners>"
        "<listeners><listener>com.example.B</listener></listeners>"
    )

    config = build(xml)

    assert config.network.addresses == ["a", "b"]
    assert config.properties == {"x": "1", "y": "3"}
    assert config.listeners == ["com.example.A", "com.example.B"]


def test_empty_document_uses_model_defaults():
    config = build(client_xml())

    assert config.group.name == "dev"
    assert config.executor_pool_size == -1
    assert config.network.connection_timeout == 5000
    assert config.network.socket_interceptor.enabled is False


def test_unknown_elements_are_ignored(caplog):
    xml = client_xml("<near-cache/><network><unknown-option/></network>")

    with caplog.at_level(logging.WARNING, logger="clientconfig"):
        config = build(xml)

    assert config.network.addresses == []
    messages = [record.getMessage() for record in caplog.records]
    assert "Ignoring unknown configuration element" in messages
    assert "Ignoring unknown network element" in messages


def test_property_without_name():
    xml = client_xml("<properties><property>1</property></properties>")

    with pytest.raises(ConfigValidationError):
        build(xml)


@pytest.mark.parametrize(
    "body, field",
    [
        ("<load-balancer type=\"sticky\"/>", "load_balancer"),
        ("<executor-pool-size>0</executor-pool-size>", "executor_pool_size"),
        ("<network><connection-timeout>-1</connection-timeout></network>", "network.connection_timeout"),
        ("<network><smart-routing>maybe</smart-routing></network>", "network.smart_routing"),
    ],
)
def test_invalid_values(body, field):
    with pytest.raises(ConfigValidationError) as exc_info:
        build(client_xml(body))

    assert field in exc_info.value.field_errors
    assert exc_info.value.error_code == "CONFIG_VALIDATION_FAILED"
