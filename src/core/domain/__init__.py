"""Modelos y errores del dominio.

Por qué:
- Aquí viven las estructuras puras del cliente: descriptor de request,
  resultado clasificado y opciones de serialización.
- El dominio no conoce la CLI; de httpx solo toma el alias `TransportFault`.
"""
