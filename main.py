"""Main entry point for the MQTT stream bridge."""

from mqttstream.main import run

if __name__ == "__main__":
    run()
