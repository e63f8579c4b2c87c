"""Доменные исключения PDFShare.

Сервисы поднимают эти исключения, а обработчики в app.main переводят их
в HTTP-ответы. Отказ в доступе и отсутствие строки намеренно представлены
одним типом, чтобы ответ не раскрывал существование документа.
"""


class PDFShareError(Exception):
    """Базовое исключение приложения"""

    detail = "Operation failed"

    def __init__(self, detail: str = None):
        if detail:
            self.detail = detail
        super().__init__(self.detail)


class ValidationFailed(PDFShareError):
    """Входные данные отклонены до любого обращения к хранилищу или БД"""

    detail = "Invalid input"


class PayloadTooLarge(ValidationFailed):
    """Загружаемый файл превышает допустимый размер"""

    detail = "File is too large"


class AuthenticationFailed(PDFShareError):
    """Недействительный или просроченный токен"""

    detail = "Could not validate credentials"


class NotFoundOrForbidden(PDFShareError):
    """Строка не найдена или операция запрещена политикой доступа"""

    detail = "Not found"


class StorageUnavailable(PDFShareError):
    """Временная ошибка объектного хранилища, клиент может повторить запрос"""

    detail = "Storage temporarily unavailable, please retry"


class DocumentPersistenceError(PDFShareError):
    """Файл загружен, но запись метаданных не создана"""

    detail = "Failed to create document record"


class Conflict(PDFShareError):
    """Запись или объект с таким ключом уже существует"""

    detail = "Resource already exists"
