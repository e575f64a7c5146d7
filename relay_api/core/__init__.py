"""Core del relay de telemetría de tanques.

Estructura:
- domain/      → Lecturas, comandos y conexiones
- validation/  → Codec de mensajes del controlador
- registry     → Registro de conexiones por rol
- fanout       → Broadcast a suscriptores
- command_relay → Comandos hacia el controlador
- monitoring/  → Estadísticas
"""
