"""Infraestrutura compartilhada dos adapters Django."""
