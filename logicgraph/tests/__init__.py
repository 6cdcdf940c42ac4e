"""Tests for logicgraph."""
