"""SQLAlchemy implementation of AssignmentRepository"""
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from app.domain.entities.assignment import Assignment, AssignmentCategory, AssignmentStatus
from app.domain.repositories.assignment_repository import AssignmentRepository
from app.infrastructure.database.base import translate_conflicts
from app.infrastructure.database.models import AssignmentModel


class AssignmentRepositoryDB(AssignmentRepository):
    """SQLAlchemy implementation of AssignmentRepository.

    Writes only flush; the unit of work owns the transaction. The partial
    unique indexes on ``assignments`` turn a lost race into an
    ``IntegrityError`` which surfaces as ``ConcurrencyConflictError``.
    """

    def __init__(self, db: Session):
        self.db = db

    def _assignment_model_to_entity(self, model: AssignmentModel) -> Assignment:
        """Convert AssignmentModel to Assignment entity"""
        return Assignment(
            id=str(model.id),
            resource_id=str(model.resource_id),
            employee_id=str(model.employee_id),
            item_id=str(model.item_id) if model.item_id else None,
            category=AssignmentCategory(model.category),
            status=AssignmentStatus(model.status),
            quantity=model.quantity,
            assigned_by=model.assigned_by,
            assigned_at=model.assigned_at,
            returned_at=model.returned_at,
            return_reason=model.return_reason,
            notes=model.notes,
            split_from_id=str(model.split_from_id) if model.split_from_id else None,
            updated_at=model.updated_at,
        )

    async def create(self, assignment: Assignment) -> Assignment:
        """Create a new assignment"""
        assignment_model = AssignmentModel(
            id=assignment.id,
            resource_id=assignment.resource_id,
            employee_id=assignment.employee_id,
            item_id=assignment.item_id,
            category=assignment.category,
            status=assignment.status,
            quantity=assignment.quantity,
            assigned_by=assignment.assigned_by,
            assigned_at=assignment.assigned_at,
            returned_at=assignment.returned_at,
            return_reason=assignment.return_reason,
            notes=assignment.notes,
            split_from_id=assignment.split_from_id,
            updated_at=assignment.updated_at,
        )
        self.db.add(assignment_model)
        with translate_conflicts():
            self.db.flush()
        return self._assignment_model_to_entity(assignment_model)

    async def get_by_id(self, assignment_id: str) -> Optional[Assignment]:
        """Get assignment by ID"""
        assignment_model = (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.id == assignment_id)
            .populate_existing()
            .first()
        )
        if not assignment_model:
            return None
        return self._assignment_model_to_entity(assignment_model)

    async def get_active_by_resource(self, resource_id: str) -> List[Assignment]:
        """Get ACTIVE assignments of a resource, oldest first"""
        assignment_models = (
            self.db.query(AssignmentModel)
            .filter(
                AssignmentModel.resource_id == resource_id,
                AssignmentModel.status == AssignmentStatus.ACTIVE,
            )
            .order_by(AssignmentModel.assigned_at, AssignmentModel.id)
            .populate_existing()
            .all()
        )
        return [self._assignment_model_to_entity(model) for model in assignment_models]

    async def get_active_by_item(self, item_id: str) -> List[Assignment]:
        """Get ACTIVE assignments referencing an item"""
        assignment_models = (
            self.db.query(AssignmentModel)
            .filter(
                AssignmentModel.item_id == item_id,
                AssignmentModel.status == AssignmentStatus.ACTIVE,
            )
            .populate_existing()
            .all()
        )
        return [self._assignment_model_to_entity(model) for model in assignment_models]

    async def get_all(
        self,
        resource_id: Optional[str] = None,
        employee_id: Optional[str] = None,
        status: Optional[AssignmentStatus] = None,
        category: Optional[AssignmentCategory] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Assignment], int]:
        """Get a page of assignments, newest first, and the total match count"""
        query = self.db.query(AssignmentModel)
        if resource_id:
            query = query.filter(AssignmentModel.resource_id == resource_id)
        if employee_id:
            query = query.filter(AssignmentModel.employee_id == employee_id)
        if status:
            query = query.filter(AssignmentModel.status == status)
        if category:
            query = query.filter(AssignmentModel.category == category)

        total = query.count()
        assignment_models = (
            query.order_by(AssignmentModel.assigned_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [self._assignment_model_to_entity(model) for model in assignment_models], total

    async def update(self, assignment: Assignment) -> Assignment:
        """Update assignment"""
        assignment_model = self.db.query(AssignmentModel).filter(AssignmentModel.id == assignment.id).first()
        if not assignment_model:
            raise ValueError(f"Assignment with ID '{assignment.id}' not found")

        assignment_model.status = assignment.status
        assignment_model.quantity = assignment.quantity
        assignment_model.returned_at = assignment.returned_at
        assignment_model.return_reason = assignment.return_reason
        assignment_model.notes = assignment.notes
        assignment_model.updated_at = assignment.updated_at

        with translate_conflicts():
            self.db.flush()
        return self._assignment_model_to_entity(assignment_model)
