"""Read scoping per role, including the step-2 gate on single-order reads."""
import pytest

from datravel.core.exceptions import NotVisibleError, RoleForbiddenError
from datravel.models.account import Role
from datravel.services.access import TravelOrderAccess
from datravel.services.approval_workflow import DirectorAction
from tests.helpers import as_user


class TestPersonnelScope:

    def test_owner_reads_own_order(self, db, make_order, personnel):
        order = make_order(personnel)
        found = TravelOrderAccess(db).get_visible_order(as_user(personnel, Role.PERSONNEL), order.id)
        assert found.id == order.id

    def test_other_personnel_gets_not_found(self, db, make_order, make_personnel, personnel):
        order = make_order(personnel)
        stranger = make_personnel()
        with pytest.raises(NotVisibleError):
            TravelOrderAccess(db).get_visible_order(as_user(stranger, Role.PERSONNEL), order.id)

    def test_scoped_list_only_has_own_orders(self, db, make_order, make_personnel, personnel):
        mine = make_order(personnel)
        make_order(make_personnel())
        ids = [o.id for o in TravelOrderAccess(db).scoped_orders(as_user(personnel, Role.PERSONNEL))]
        assert ids == [mine.id]

    def test_owned_order_requires_personnel_role(self, db, make_order, personnel, admin):
        order = make_order(personnel)
        with pytest.raises(RoleForbiddenError):
            TravelOrderAccess(db).get_owned_order(as_user(admin, Role.ADMIN), order.id)

    def test_role_comes_from_session_not_id(self, db, make_order, make_director, personnel):
        """A director whose id matches the owner's personnel id still cannot read the draft."""
        order = make_order(personnel)
        director = make_director()
        assert director.id == personnel.id
        with pytest.raises(NotVisibleError):
            TravelOrderAccess(db).get_visible_order(as_user(director, Role.DIRECTOR), order.id)


class TestDirectorScope:

    def test_recommender_sees_order_immediately(self, db, submitted_order, recommender):
        access = TravelOrderAccess(db)
        assert access.get_visible_order(as_user(recommender, Role.DIRECTOR), submitted_order.id).id == submitted_order.id

    def test_approver_gated_until_recommended(self, db, workflow, submitted_order, recommender, approver):
        access = TravelOrderAccess(db)
        director = as_user(approver, Role.DIRECTOR)
        with pytest.raises(NotVisibleError):
            access.get_visible_order(director, submitted_order.id)

        workflow.act(as_user(recommender, Role.DIRECTOR), submitted_order.id, DirectorAction.RECOMMEND)
        db.expire_all()
        assert access.get_visible_order(director, submitted_order.id).id == submitted_order.id

    def test_approver_never_sees_order_rejected_at_step_one(self, db, workflow, submitted_order, recommender, approver):
        workflow.act(as_user(recommender, Role.DIRECTOR), submitted_order.id, DirectorAction.REJECT)
        with pytest.raises(NotVisibleError):
            TravelOrderAccess(db).get_visible_order(as_user(approver, Role.DIRECTOR), submitted_order.id)

    def test_unassigned_director_sees_nothing(self, db, make_director, submitted_order):
        outsider = as_user(make_director(), Role.DIRECTOR)
        assert TravelOrderAccess(db).scoped_orders(outsider).all() == []


class TestAdminScope:

    def test_admin_reads_everything(self, db, make_order, make_personnel, admin, submitted_order):
        other = make_order(make_personnel())
        ids = {o.id for o in TravelOrderAccess(db).scoped_orders(as_user(admin, Role.ADMIN))}
        assert ids == {submitted_order.id, other.id}

    def test_admin_reads_draft(self, db, make_order, personnel, admin):
        order = make_order(personnel)
        assert TravelOrderAccess(db).get_visible_order(as_user(admin, Role.ADMIN), order.id).id == order.id
