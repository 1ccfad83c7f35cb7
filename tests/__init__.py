"""Test suite for convextri."""
