"""On-board computer control of a CAN bus camera: commands, acknowledgements and media transfer."""

__version__ = "0.1.0"