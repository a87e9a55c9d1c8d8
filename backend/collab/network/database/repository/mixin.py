from typing import TYPE_CHECKING, Any, Generic, List, Optional, Type, TypeVar, Union

from loguru import logger
from psycopg2 import errorcodes
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, MultipleResultsFound, NoResultFound
from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import BinaryExpression, ColumnElement, UnaryExpression

from collab.common.domain import BaseDomain
from collab.network.database.repository.exceptions import (
    MultipleRepositoryObjectsFound,
    PreventingModelTruncation,
    RepositoryObjectNotFound,
    RepositoryReferenceViolation,
    RepositoryUniqueViolation,
)
from collab.network.database.session import db

if TYPE_CHECKING:
    from collab.common.model import BaseModel


# sqlite reports constraint failures by message only, postgres by SQLSTATE
SQLITE_UNIQUE_PREFIX = 'UNIQUE constraint failed'
SQLITE_FOREIGN_KEY_PREFIX = 'FOREIGN KEY constraint failed'


def _is_violation(exc: IntegrityError, pgcode: str, sqlite_prefix: str) -> bool:
    code = getattr(exc.orig, 'pgcode', None)
    if code is not None:
        return code == pgcode
    return str(exc.orig).startswith(sqlite_prefix)


class BaseQueryManager:
    def __init__(self, model: Type['BaseModel']) -> None:  # type: ignore[type-arg]
        self.model = model

    def get_query(self, *clauses: Any, **specification: Any) -> 'Query[BaseModel]':  # type: ignore[type-arg]
        query = self.model._get_session().query(self.model)
        for clause in clauses:
            query = query.where(clause)
        for key, value in specification.items():
            query = self.model._parse_specification(query, key, value)
        return query


ReadDomainType = TypeVar('ReadDomainType', bound=BaseDomain)
CreateDomainType = TypeVar('CreateDomainType', bound=BaseDomain)


class RepositoryMixin(Generic[ReadDomainType, CreateDomainType]):
    """
    Database access layer. All interaction with the database should be routed
    through this layer. all public interfaces accept domains subclasses from the
    pydantic base class with from_attributes for simple domain -> orm mapping
    """

    __create_domain__: Type[CreateDomainType] = NotImplemented
    __read_domain__: Type[ReadDomainType] = NotImplemented
    query_manager: Type[BaseQueryManager] | None = BaseQueryManager

    @classmethod
    def _get_session(cls) -> Session:
        return db.session

    @classmethod
    def get_query(cls, *clauses: Any, **specification: Any) -> 'Query[BaseModel]':  # type: ignore[type-arg]
        if cls.query_manager is None:
            raise ValueError(f'query_manager not set for {cls.__name__}')
        return cls.query_manager(cls).get_query(*clauses, **specification)  # type: ignore[arg-type]

    @classmethod
    def get(cls, *clauses: Union[BinaryExpression[Any], ColumnElement[bool]], **specification: Any) -> ReadDomainType:
        instance = cls._get(*clauses, **specification)

        return cls._to_domain(instance)

    @classmethod
    def get_or_none(cls, *clauses: Any, **specification: Any) -> ReadDomainType | None:
        try:
            instance = cls._get(*clauses, **specification)
        except RepositoryObjectNotFound:
            return None

        return cls._to_domain(instance)

    @classmethod
    def _get(cls, *clauses: Any, **specification: Any) -> 'BaseModel[Any, Any]':
        try:
            return cls.get_query(*clauses, **specification).one()
            # assert one and only one object returned
        except MultipleResultsFound:
            raise MultipleRepositoryObjectsFound(f'Multiple results found for {cls.__name__}: {specification}!')
        except NoResultFound:
            raise RepositoryObjectNotFound(f'{cls.__name__}: {specification} not found!')

    @classmethod
    def list(
        cls,
        *clauses: Any,
        ordering: Optional[List[Union[str, UnaryExpression]]] = None,
        **specification: Any,  # type: ignore[type-arg]
    ) -> List[ReadDomainType]:
        query = cls.get_query(*clauses, **specification)
        if ordering:
            orders = cls._parse_ordering(ordering)
            query = query.order_by(*orders)
        return [cls._to_domain(obj) for obj in query]

    @classmethod
    def list_attribute(cls, attribute: str, *clauses: Any, **specification: Any) -> List[Any]:
        model_attribute = getattr(cls, attribute)
        query = cls.get_query(*clauses, **specification).with_entities(model_attribute)

        return [values_list[0] for values_list in query]

    @classmethod
    def count(cls, *clauses: Any, **specification: Any) -> int:
        query = cls.get_query(*clauses, **specification)
        return int(query.count())

    @classmethod
    def create(cls, domain_obj: CreateDomainType) -> ReadDomainType:
        model_instance = cls._create(**domain_obj.to_dict())
        return cls._to_domain(model_instance)

    @classmethod
    def create_unique(cls, domain_obj: CreateDomainType) -> ReadDomainType:
        """
        Insert guarded by a unique constraint. The insert runs in a SAVEPOINT so
        a violation only discards this row and the surrounding transaction stays usable.
        :raises RepositoryUniqueViolation: when a unique constraint rejects the row
        :raises RepositoryReferenceViolation: when a referenced row does not exist
        """
        session = cls._get_session()
        model_instance = cls(**domain_obj.to_dict())
        try:
            with session.begin_nested():
                session.add(model_instance)
        except IntegrityError as exc:
            if _is_violation(exc, errorcodes.UNIQUE_VIOLATION, SQLITE_UNIQUE_PREFIX):
                logger.info(f'{cls.__name__} insert rejected by unique constraint')
                raise RepositoryUniqueViolation(
                    f'{cls.__name__} violates a unique constraint',
                    context={'orig': str(exc.orig)},
                ) from exc
            if _is_violation(exc, errorcodes.FOREIGN_KEY_VIOLATION, SQLITE_FOREIGN_KEY_PREFIX):
                logger.info(f'{cls.__name__} insert references a missing row')
                raise RepositoryReferenceViolation(
                    f'{cls.__name__} references a missing row',
                    context={'orig': str(exc.orig)},
                ) from exc
            raise

        return cls._to_domain(model_instance)

    @classmethod
    def delete(cls, *clauses: Union[BinaryExpression[Any], ColumnElement[bool]]) -> int:
        if not clauses:
            raise PreventingModelTruncation(f'Must pass clauses to avoid truncating {cls.__name__}')

        # Ensure clauses like and_() that ultimately evaluate to nothing are checked as well
        non_empty_clauses = any(str(clause.compile()) for clause in clauses)
        if not non_empty_clauses:
            raise PreventingModelTruncation(f'Empty clauses would cause truncating {cls.__name__}!')

        try:
            return cls.get_query(*clauses).delete(synchronize_session='fetch')
        except IntegrityError:
            cls._get_session().rollback()
            raise

    @classmethod
    def update(cls, id: str, **updates: Any) -> ReadDomainType:
        model_instance = cls.get_query(id=id).one()
        for key, value in updates.items():
            if not hasattr(model_instance, key):
                raise ValueError(f"The key '{key}' is not a valid attribute for this model.")
            setattr(model_instance, key, value)

        try:
            cls._get_session().flush([model_instance])
        except IntegrityError:
            cls._get_session().rollback()
            raise

        return cls.get(cls.id == id)  # type: ignore[attr-defined]

    @classmethod
    def conditional_update(
        cls,
        id: str,
        *clauses: Union[BinaryExpression[Any], ColumnElement[bool]],
        **updates: Any,
    ) -> ReadDomainType | None:
        """
        Single UPDATE ... WHERE id = :id AND <clauses>. The database evaluates the
        predicate and writes atomically, the affected row count says who won.
        Returns the updated row, or None when the predicate no longer held.
        """
        for key in updates:
            if not hasattr(cls, key):
                raise ValueError(f"The key '{key}' is not a valid attribute for this model.")

        statement = (
            update(cls)
            .where(cls.id == id, *clauses)  # type: ignore[attr-defined]
            .values(**updates)
            .execution_options(synchronize_session=False)
        )
        session = cls._get_session()
        result = session.execute(statement)
        if result.rowcount == 0:
            return None
        if result.rowcount > 1:
            raise MultipleRepositoryObjectsFound(f'Conditional update touched {result.rowcount} {cls.__name__} rows')

        # The bulk UPDATE bypasses the identity map, reload what the database holds
        instance = session.get(cls, id, populate_existing=True)
        return cls._to_domain(instance)  # type: ignore[arg-type]

    @classmethod
    def _create(cls, **attributes: Any) -> 'BaseModel[Any, Any]':
        model_instance = cls(**attributes)
        cls._get_session().add(model_instance)
        try:
            cls._get_session().flush([model_instance])
        except IntegrityError:
            cls._get_session().rollback()
            raise

        return model_instance  # type: ignore[return-value]

    @classmethod
    def _parse_ordering(
        cls, ordering: List[Union[str, 'UnaryExpression[Any]']] | None = None
    ) -> List['UnaryExpression[Any]']:
        """
        Parses str references for a field like:
        ['-created_at', 'title']
        """
        order_expressions = []
        if ordering:
            for order in ordering:
                if isinstance(order, str):
                    if order[0] == '-':
                        # Get rid of first character
                        ordering_attr = getattr(cls, order[1:])
                        order_expressions.append(ordering_attr.desc())
                    else:
                        ordering_attr = getattr(cls, order)
                        order_expressions.append(ordering_attr.asc())
                else:
                    # Assume already an expression
                    order_expressions.append(order)

        return order_expressions

    @classmethod
    def _parse_specification(cls, query: Any, key: Any, value: Any) -> Any:
        """
        Parses str references for a field like:
        """
        return query.where(getattr(cls, key) == value)

    @classmethod
    def _to_domain(cls, model_instance: 'BaseModel[Any, Any]') -> ReadDomainType:
        return cls.__read_domain__.model_validate(model_instance)  # type: ignore[no-any-return]
