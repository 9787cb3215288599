import abc
from typing import List, Optional, Set

from orders.adapters import orm
from orders.domain import model


class AbstractOrderRepository(abc.ABC):
    def __init__(self):
        self.seen = set()  # type: Set[model.Order]

    def add(self, order: model.Order) -> str:
        self._add(order)
        self.seen.add(order)
        return order.order_id

    def get(self, order_id) -> Optional[model.Order]:
        order = self._get(order_id)
        if order:
            self.seen.add(order)
        return order

    def list(self, patient_id: Optional[str] = None, is_complete: Optional[bool] = None) -> List[model.Order]:
        orders = self._list(patient_id, is_complete)
        for order in orders:
            self.seen.add(order)
        return orders

    @abc.abstractmethod
    def _add(self, order: model.Order):
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, order_id) -> Optional[model.Order]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list(self, patient_id, is_complete) -> List[model.Order]:
        raise NotImplementedError


class AbstractExamRepository(abc.ABC):
    @abc.abstractmethod
    def add(self, exam: model.Exam) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def get(self, exam_id) -> Optional[model.Exam]:
        raise NotImplementedError


class AbstractResultRepository(abc.ABC):
    @abc.abstractmethod
    def add(self, result: model.Result) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def get(self, result_id) -> Optional[model.Result]:
        raise NotImplementedError


class SqlAlchemyOrderRepository(AbstractOrderRepository):
    def __init__(self, session):
        super().__init__()
        self.session = session

    def _add(self, order):
        self.session.add(order)

    def _get(self, order_id):
        return self.session.query(model.Order).filter_by(order_id=order_id).first()

    def _list(self, patient_id, is_complete):
        query = self.session.query(model.Order)
        if patient_id is not None:
            query = query.filter_by(patient_id=patient_id)
        if is_complete is not None:
            query = query.filter_by(is_complete=is_complete)
        return query.order_by(orm.orders.c.created_at).all()


class SqlAlchemyExamRepository(AbstractExamRepository):
    def __init__(self, session):
        self.session = session

    def add(self, exam):
        self.session.add(exam)
        return exam.exam_id

    def get(self, exam_id):
        return self.session.query(model.Exam).filter_by(exam_id=exam_id).first()


class SqlAlchemyResultRepository(AbstractResultRepository):
    def __init__(self, session):
        self.session = session

    def add(self, result):
        self.session.add(result)
        return result.result_id

    def get(self, result_id):
        return self.session.query(model.Result).filter_by(result_id=result_id).first()
