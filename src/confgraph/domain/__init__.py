"""Metadata graph resolution core: adapter-free domain logic."""
