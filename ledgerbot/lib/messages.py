"""Externalized message templates for WhatsApp replies.

All user-facing message templates live here so wording can change
without touching the routing code.
Current language: Portuguese (pt-BR).
"""

# =============================================================================
# Inbound interpretation
# =============================================================================

HELP_MESSAGE = """❓ Não consegui entender. Envie no formato:

💰 R$ 50,00
📝 Descrição
🏷️ Categoria
🏠 Casa ou Clínica

Ou envie uma imagem do comprovante!"""

TRANSCRIPTION_FAILED_MESSAGE = (
    "😕 Desculpe, não consegui entender seu áudio. "
    "Tente novamente ou envie a transação por texto."
)

TRANSACTION_CONFIRMATION = """✅ *Transação registrada!*

💰 Valor: R$ {amount}
📅 Data: {date}
📝 Descrição: {description}
🏷️ Categoria: {category}
🏠 Contexto: {context}

💡 Você pode editar esta transação no sistema."""

DEFAULT_DESCRIPTION = "Transação via WhatsApp"

DEFAULT_SENDER_NAME = "WhatsApp"

CONTEXT_LABELS = {
    "HOME": "Casa",
    "CLINIC": "Clínica",
}

# =============================================================================
# Outbound documents
# =============================================================================

PRESCRIPTION_FILENAME = "Receita - {patient_name}.pdf"

DEFAULT_PATIENT_NAME = "Paciente"

# =============================================================================
# HTTP surface
# =============================================================================

ERROR_FROM_REQUIRED = 'Campo "from" é obrigatório'

ERROR_UNSUPPORTED_MESSAGE = "Tipo de mensagem não suportado ou dados faltando"

ERROR_TRANSCRIPTION = "Erro ao transcrever áudio"

ERROR_PROCESSING = "Erro ao processar mensagem"

ERROR_QR_UNAVAILABLE = "QR Code não disponível"

HINT_QR_UNAVAILABLE = "Aguarde alguns segundos ou verifique se o WhatsApp já está conectado"

QR_READY = "Escaneie este QR Code com o WhatsApp"

ERROR_DOCUMENT_FIELDS = "Campos obrigatórios: phone, patientId, prescriptionId"

ERROR_NOT_CONNECTED = "WhatsApp não conectado. Verifique a conexão."

ERROR_DOCUMENT = "Erro ao enviar documento"

DOCUMENT_SENT = "Receita enviada para {phone}"

ERROR_IMAGE_FIELDS = "Campos obrigatórios: phone, imageUrl"

ERROR_IMAGE = "Erro ao enviar imagem"

IMAGE_SENT = "Imagem enviada para {phone}"

HELP_SENT = "Texto não pôde ser processado, mensagem de ajuda enviada"


def format_amount(amount) -> str:
    """Format a Decimal amount with two decimals (e.g., 50.00)."""
    return f"{amount:.2f}"


def format_date(value) -> str:
    """Format a date the way pt-BR users read it (DD/MM/YYYY)."""
    return value.strftime("%d/%m/%Y")


def context_label(context_tag: str) -> str:
    """Human label for a context tag."""
    return CONTEXT_LABELS.get(context_tag, context_tag)
