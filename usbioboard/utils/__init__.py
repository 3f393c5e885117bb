"""Configuration loading and protocol constants."""
