"""Workflow Sync - re-import n8n workflows whenever their JSON files change."""

__version__ = "0.1.0"
