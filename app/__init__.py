"""Laporan procurement-request approval service."""
