# SPDX-License-Identifier: MIT
"""Toolchain protocol and base class."""
