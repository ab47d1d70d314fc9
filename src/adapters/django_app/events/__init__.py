"""Publicação e processamento de Domain Events."""
