"""Maintenance of pacman package repository databases."""
