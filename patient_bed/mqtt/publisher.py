import threading

import paho.mqtt.client as mqtt

from .mqtt_config import MqttConfig


class MQTTPublisher:
    def __init__(self, config: MqttConfig):
        """Initializes the MQTT publisher with connection and TLS details."""
        self.client = mqtt.Client(
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            client_id=config.id,
            clean_session=True,
        )
        self.broker_host = config.broker_host
        self.broker_port = config.broker_port
        self.keepalive = config.keepalive
        self.publish_timeout = config.publish_timeout
        self.id = config.id
        if config.username:
            self.client.username_pw_set(
                username=config.username, password=config.password
            )
        if config.ca_cert:
            self.client.tls_set(
                ca_certs=config.ca_cert,
                certfile=config.client_cert,
                keyfile=config.private_key,
            )
        # paho's network loop reconnects on its own once connected
        self.client.reconnect_delay_set(min_delay=1, max_delay=30)
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.connected = False
        self._connected_event = threading.Event()

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        """Callback when connected to broker."""
        if reason_code == 0:
            print(f"[{self.id}] Connection success")
            self.connected = True
            self._connected_event.set()
        else:
            print(f"[{self.id}] Failed to connect to MQTT broker: {reason_code}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        """Callback when disconnected from broker."""
        if self.connected:
            print(f"[{self.id}] Connection lost: {reason_code}")
        self.connected = False
        self._connected_event.clear()

    def connect(self, timeout: float = 10.0) -> bool:
        """Connect to the MQTT broker and wait for the CONNACK."""
        print(
            f"[{self.id}] Connecting to MQTT broker at "
            f"{self.broker_host}:{self.broker_port}..."
        )
        try:
            self.client.connect(
                self.broker_host, self.broker_port, keepalive=self.keepalive
            )
        except OSError as e:
            print(f"[{self.id}] Error connecting: {e}")
            self.connected = False
            return False
        self.client.loop_start()
        if not self._connected_event.wait(timeout):
            print(f"[{self.id}] No CONNACK from broker within {timeout}s")
            self.client.loop_stop()
        return self.connected

    def disconnect(self):
        """Disconnect from the MQTT broker."""
        print(f"[{self.id}] Disconnecting...")
        self.client.disconnect()
        self.client.loop_stop()
        self.connected = False
        print(f"[{self.id}] Disconnected.")

    def publish(self, topic: str, payload: bytes, qos: int = 1) -> bool:
        """Publishes a payload and reports whether the broker accepted it."""
        if not self.connected:
            print(f"[{self.id}] Client not connected. Waiting for reconnect...")
        try:
            info = self.client.publish(topic, payload, qos=qos)
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                print(
                    f"[{self.id}] Failed to publish to {topic}: "
                    f"{mqtt.error_string(info.rc)}"
                )
                return False
            if qos == 0:
                return True
            info.wait_for_publish(timeout=self.publish_timeout)
            return info.is_published()
        except (ValueError, RuntimeError) as e:
            print(f"[{self.id}] Error publishing to {topic}: {e}")
            return False

    def is_connected(self) -> bool:
        """Returns whether the client is connected to the broker."""
        return self.connected


class StdoutPublisher:
    """Publisher that prints payloads instead of sending them to a broker."""

    def __init__(self, id: str = "stdout"):
        self.id = id
        self.connected = False

    def connect(self, timeout: float = 0.0) -> bool:
        self.connected = True
        return True

    def disconnect(self):
        self.connected = False

    def publish(self, topic: str, payload: bytes, qos: int = 1) -> bool:
        print(f"[{self.id}] {topic} (qos {qos}): {payload.decode('utf-8')}")
        return True

    def is_connected(self) -> bool:
        return self.connected
