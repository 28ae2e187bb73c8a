"""Lesson booking API: book and cancel lessons against prepaid packages."""
