"""Shared helpers: request logging and currency conversion."""
