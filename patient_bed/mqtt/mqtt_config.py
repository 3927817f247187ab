import os
from dataclasses import dataclass
from typing import Optional

CLIENT_ID_PREFIX = "PatientBed"


@dataclass
class MqttConfig:
    """Configuration for MQTT connections"""

    broker_host: str
    broker_port: int
    id: str
    ca_cert: Optional[str] = None
    client_cert: Optional[str] = None
    private_key: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    keepalive: int = 60
    publish_timeout: float = 10.0


def device_id_for_instance(instance: str) -> str:
    return f"{CLIENT_ID_PREFIX}{instance}"


def parse_broker_url(broker_url: str):
    """Split "host:port" (optionally prefixed with ssl:// or mqtts://)."""
    _, _, address = broker_url.rpartition("://")
    host, _, port = address.rpartition(":")
    if not host or not port.isdigit():
        raise ValueError(f"Broker URL must look like host:port, got {broker_url!r}")
    return host, int(port)


def device_mqtt_config(
    broker_url: str,
    instance: str,
    ca_cert: Optional[str] = None,
    cert_dir: Optional[str] = None,
    keepalive: int = 60,
    publish_timeout: float = 10.0,
) -> MqttConfig:
    """Build the connection settings for one provisioned bed device."""
    host, port = parse_broker_url(broker_url)
    client_cert = private_key = None
    if cert_dir:
        client_cert = os.path.join(cert_dir, f"device_{instance}.pem.crt")
        private_key = os.path.join(cert_dir, f"device_{instance}.private.key")
    return MqttConfig(
        broker_host=host,
        broker_port=port,
        id=device_id_for_instance(instance),
        ca_cert=ca_cert,
        client_cert=client_cert,
        private_key=private_key,
        keepalive=keepalive,
        publish_timeout=publish_timeout,
    )
