"""Test suite for roadledger_gateway."""
