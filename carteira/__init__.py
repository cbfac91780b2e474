"""Carteira - investment tracking backend."""
