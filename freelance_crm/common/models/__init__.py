"""Shared data models across modules."""

from .base import Client, ClientDraft, Project, ProjectDraft, ProjectStatus, normalize_tags

__all__ = ['Client', 'ClientDraft', 'Project', 'ProjectDraft', 'ProjectStatus', 'normalize_tags']
