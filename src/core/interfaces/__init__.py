"""Interfaces/abstracciones del Core.

Por qué:
- Define los contratos (Protocol) del executor asíncrono y de la fachada
  bloqueante.
- Permite sustituir el executor real por un stub en tests.
"""
