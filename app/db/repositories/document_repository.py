from typing import Optional, List, Set, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError
import uuid

from app.db.models.document import Document as DocumentModel
from app.domains.access.policies import DocumentPolicy, Principal

if TYPE_CHECKING:
    from app.domains.documents.entities import Document


class DocumentRepository:
    """Репозиторий для работы с метаданными документов.

    Методы чтения принимают Principal и фильтруют строки условием
    DocumentPolicy.read_clause, поэтому невидимый документ неотличим
    от отсутствующего.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: "Document") -> "Document":
        """Создание записи о документе"""
        db_document = DocumentModel(
            uuid=document.uuid,
            name=document.name,
            storage_key=document.storage_key,
            owner_id=document.owner_id,
            share_token=document.share_token
        )

        self.session.add(db_document)
        try:
            await self.session.commit()
            await self.session.refresh(db_document)
            return self._to_domain(db_document)
        except IntegrityError:
            await self.session.rollback()
            raise ValueError("Invalid owner_id or duplicate storage key")

    async def get_visible(self, document_uuid: uuid.UUID, principal: Principal) -> Optional["Document"]:
        """Получение документа, если он виден субъекту"""
        result = await self.session.execute(
            select(DocumentModel).where(
                DocumentModel.uuid == document_uuid,
                DocumentPolicy.read_clause(principal)
            )
        )
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def get_by_share_token(self, share_token: str) -> Optional["Document"]:
        """Поиск документа по токену ссылки"""
        if not share_token:
            return None
        result = await self.session.execute(
            select(DocumentModel).where(DocumentModel.share_token == share_token)
        )
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def list_owned(
        self,
        principal: Principal,
        query: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List["Document"]:
        """Документы владельца, новые сверху, с фильтром по имени"""
        stmt = select(DocumentModel).where(DocumentPolicy.owner_clause(principal))

        if query:
            stmt = stmt.where(DocumentModel.name.ilike(f"%{query}%"))

        result = await self.session.execute(
            stmt
            .order_by(DocumentModel.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def count_owned(self, principal: Principal, query: Optional[str] = None) -> int:
        """Подсчет документов владельца"""
        stmt = select(func.count(DocumentModel.uuid)).where(DocumentPolicy.owner_clause(principal))

        if query:
            stmt = stmt.where(DocumentModel.name.ilike(f"%{query}%"))

        result = await self.session.execute(stmt)
        return result.scalar()

    async def update(self, document: "Document") -> "Document":
        """Обновление изменяемых полей: имя и токен ссылки"""
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.uuid == document.uuid)
            .values(
                name=document.name,
                share_token=document.share_token,
                updated_at=document.updated_at
            )
        )

        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ValueError("Share token collision")

        result = await self.session.execute(
            select(DocumentModel).where(DocumentModel.uuid == document.uuid)
        )
        return self._to_domain(result.scalar_one())

    async def delete(self, document_uuid: uuid.UUID) -> bool:
        """Удаление документа (комментарии удаляются каскадно)"""
        stmt = delete(DocumentModel).where(DocumentModel.uuid == document_uuid)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    async def all_storage_keys(self) -> Set[str]:
        """Все ключи, на которые ссылаются записи (для сверки хранилища)"""
        result = await self.session.execute(select(DocumentModel.storage_key))
        return set(result.scalars().all())

    def _to_domain(self, db_document: DocumentModel) -> "Document":
        """Преобразование модели БД в доменную сущность"""
        from app.domains.documents.entities import Document

        return Document(
            uuid=db_document.uuid,
            name=db_document.name,
            storage_key=db_document.storage_key,
            owner_id=db_document.owner_id,
            share_token=db_document.share_token,
            created_at=db_document.created_at,
            updated_at=db_document.updated_at
        )
