# -*- coding: utf-8 -*-
"""
@Time    : 2025/10/14 09:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 机器人回复模板（Markdown）
"""

HELP_TPL = """
🤖 *Traductor Bot*

Este bot te ayuda a enviar mensajes de Telegram a la app de traducción.

*Cómo usar:*
1️⃣ Enviá `/new` para crear una nueva sesión
2️⃣ Reenviá (forward) los mensajes que quieras traducir
3️⃣ Enviá `/done` cuando termines
4️⃣ Usá el código en la web app: {web_app_url}

*Comandos:*
/new - Crear nueva sesión
/done - Finalizar sesión actual
/cancel - Cancelar sesión actual
/help - Ver esta ayuda
"""

SESSION_CREATED_TPL = """
✅ *Sesión creada!*

Tu código es: `{code}`

Ahora podés:
1️⃣ Reenviar (forward) los mensajes que querés traducir
2️⃣ Cuando termines, enviá /done
3️⃣ Ingresá el código `{code}` en la web app

El código expira en {ttl_minutes} minutos.
"""

SESSION_EXISTS_TPL = """
⚠️ Ya tenés una sesión activa con código: `{code}`

Enviá /done para finalizarla o /cancel para cancelarla.
"""

SESSION_DONE_TPL = """
✅ *Sesión finalizada!*

Código: `{code}`
Mensajes recibidos: {count}

Ahora ingresá el código en la web app:
{web_app_url}
"""

SESSION_CANCELLED_TPL = "❌ Sesión cancelada."

NO_ACTIVE_SESSION_TPL = "⚠️ No tenés ninguna sesión activa.\n\nEnviá /new para crear una nueva."

CREATE_SESSION_FIRST_TPL = "⚠️ Primero creá una sesión con /new"

MESSAGE_ADDED_TPL = (
    "✅ Mensaje agregado ({count} total)\n\nReenviá más mensajes o enviá /done para finalizar."
)

MESSAGE_NOT_ADDED_TPL = "❌ Error al agregar mensaje. La sesión puede estar cerrada o expirada."

EMPTY_FORWARD_TPL = "⚠️ Solo se pueden agregar mensajes con texto."

FORWARD_REQUIRED_TPL = (
    "⚠️ Por favor, reenviá (forward) mensajes en lugar de copiarlos.\n\n"
    "O enviá /help para ver los comandos disponibles."
)

UNKNOWN_COMMAND_TPL = "Comando no reconocido. Enviá /help para ver los comandos disponibles."

INTERNAL_ERROR_TPL = "❌ Ocurrió un error al procesar tu mensaje. Intentá de nuevo en unos minutos."
