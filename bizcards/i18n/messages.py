"""
Message catalogs for error codes and predefined titles.

Locales without a catalog (or missing a key) fall back to English; unknown
codes are returned unchanged.
"""
from typing import Dict, Optional

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        # Validation
        "name_required": "This field is required",
        "name_invalid_characters": "Only letters, spaces, periods, hyphens and apostrophes are allowed",
        "name_too_short": "Must contain at least 3 letters",
        "title_required": "Title is required",
        "phone_required": "Phone number is required",
        "phone_invalid": "Invalid phone number for the selected country",
        "email_required": "Email is required",
        "email_invalid": "Invalid email address",
        "email_domain_not_allowed": "Email must use a company domain (@cfm.com or @cfm.co.mz)",
        "url_invalid": "Invalid URL",
        "invalid_file_type": "Invalid file type. Only images (JPEG, PNG, WebP, GIF) are allowed.",
        "file_too_large": "File too large. Maximum size is 5MB.",
        "invalid_filename": "Invalid filename.",
        "invalid_file_content": "Invalid file content. File does not match its declared type. Only image files are allowed.",
        "invalid_locale": "Unsupported language",
        "validation_failed": "Please correct the highlighted fields",
        # Auth
        "invalid_credentials": "Invalid email or password",
        "incorrect_password": "Incorrect password. Please try again.",
        "too_many_attempts": "Too many attempts. Please try again in {minutes} minute(s).",
        "rate_limited": "Too many requests. Please try again later.",
        "password_verification_failed": "Unable to verify password. Please try again.",
        "signup_failed": "Unable to create account",
        # Predefined employee titles
        "titleHeadTechnicalUnit": "Head of the Technical Unit",
        "titleDirectorCommunicationImage": "Director of Communication and Image",
        "titleExecutiveBoardDirector": "Executive Board Director",
        "titleChairmanBoardDirectors": "Chairman of the Board of Directors",
        "employee": "Employee",
    },
    "pt": {
        "name_required": "Este campo é obrigatório",
        "name_invalid_characters": "Apenas letras, espaços, pontos, hífenes e apóstrofos são permitidos",
        "name_too_short": "Deve conter pelo menos 3 letras",
        "title_required": "O cargo é obrigatório",
        "phone_required": "O número de telefone é obrigatório",
        "phone_invalid": "Número de telefone inválido para o país selecionado",
        "email_required": "O email é obrigatório",
        "email_invalid": "Endereço de email inválido",
        "email_domain_not_allowed": "O email deve usar um domínio da empresa (@cfm.com ou @cfm.co.mz)",
        "url_invalid": "URL inválido",
        "invalid_file_type": "Tipo de ficheiro inválido. Apenas imagens (JPEG, PNG, WebP, GIF) são permitidas.",
        "file_too_large": "Ficheiro demasiado grande. O tamanho máximo é 5MB.",
        "invalid_filename": "Nome de ficheiro inválido.",
        "invalid_file_content": "Conteúdo do ficheiro inválido. Apenas imagens são permitidas.",
        "invalid_locale": "Idioma não suportado",
        "validation_failed": "Por favor corrija os campos assinalados",
        "invalid_credentials": "Email ou palavra-passe inválidos",
        "incorrect_password": "Palavra-passe incorreta. Tente novamente.",
        "too_many_attempts": "Demasiadas tentativas. Tente novamente dentro de {minutes} minuto(s).",
        "rate_limited": "Demasiados pedidos. Tente novamente mais tarde.",
        "password_verification_failed": "Não foi possível verificar a palavra-passe. Tente novamente.",
        "signup_failed": "Não foi possível criar a conta",
        "titleHeadTechnicalUnit": "Chefe da Unidade Técnica",
        "titleDirectorCommunicationImage": "Director de Comunicação e Imagem",
        "titleExecutiveBoardDirector": "Administrador Executivo",
        "titleChairmanBoardDirectors": "Presidente do Conselho de Administração",
        "employee": "Funcionário",
    },
}


def translate(code: str, locale: Optional[str] = None, **params) -> str:
    """
    Translate a message code for a locale.

    Args:
        code: Machine-readable message code
        locale: Target locale (falls back to English)
        **params: Values interpolated into the message

    Returns:
        Translated message, or the code itself when unknown
    """
    catalog = MESSAGES.get(locale or "en", {})
    template = catalog.get(code)
    if template is None:
        template = MESSAGES["en"].get(code)
    if template is None:
        return code
    return template.format(**params) if params else template
