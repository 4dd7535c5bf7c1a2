# SPDX-License-Identifier: MIT
"""Core build-graph types: actions, providers, include rewriting, execution."""
