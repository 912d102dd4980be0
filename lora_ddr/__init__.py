"""lora-ddr: dynamic data rate bridge for LoRaWAN devices."""

__version__ = "0.1.0"
