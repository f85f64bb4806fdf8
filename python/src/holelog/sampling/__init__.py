# Copyright (C) 2026 Darkmine Pty Ltd
# SPDX-License-Identifier: GPL-3.0-or-later

from . import data, export, identifiers, intervals, logs, model, qc, sequence, validate, view

__all__ = [
	"data",
	"export",
	"identifiers",
	"intervals",
	"logs",
	"model",
	"qc",
	"sequence",
	"validate",
	"view",
]
