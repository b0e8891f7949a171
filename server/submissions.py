# Academia - assignment submissions and grading
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth
from database.database import commit_or_conflict, get_db
from database.models import Assignment, AssignmentSubmission, Grade, SubmissionStatus, utcnow
from access import IdentityScope, NotFound, TeacherActor, ValidationFailed, resolve_letter
from access.guards import guard_submission_create, guard_submission_window
from access.policy import (
    audit_allowed,
    current_student,
    enforce_role,
    ensure_can_view_student_record,
    ensure_self,
    ensure_teaches,
    resolve_actor,
)
from access.resources import RESOURCE_SUBMISSIONS
from server.data_access import get_or_404, grade_dict, submission_dict, taught_course_ids
from server.schemas import SubmissionCreate, SubmissionGrade, SubmissionUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assignment-submissions", tags=["Assignment submissions"])


@router.get("")
async def list_submissions(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    """Admin sees every submission, a Teacher only those in courses they teach."""
    enforce_role(identity, RESOURCE_SUBMISSIONS, "list")
    actor = await resolve_actor(db, identity)
    stmt = select(AssignmentSubmission).order_by(AssignmentSubmission.submission_date.desc())
    if isinstance(actor, TeacherActor):
        stmt = stmt.where(
            AssignmentSubmission.assignment_id.in_(
                select(Assignment.id).where(Assignment.course_id.in_(taught_course_ids(actor.teacher.id)))
            )
        )
    r = await db.execute(stmt)
    return [submission_dict(s) for s in r.scalars().all()]


@router.get("/my-submissions")
async def my_submissions(identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_SUBMISSIONS, "read_own")
    student = await current_student(db, identity)
    r = await db.execute(
        select(AssignmentSubmission)
        .where(AssignmentSubmission.student_id == student.id)
        .order_by(AssignmentSubmission.submission_date.desc())
    )
    return [submission_dict(s) for s in r.scalars().all()]


@router.get("/my-submission/{assignment_id}")
async def my_submission(
    assignment_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_SUBMISSIONS, "read_own")
    student = await current_student(db, identity)
    r = await db.execute(
        select(AssignmentSubmission).where(
            AssignmentSubmission.student_id == student.id,
            AssignmentSubmission.assignment_id == assignment_id,
        )
    )
    submission = r.scalar_one_or_none()
    if submission is None:
        raise NotFound("Submission not found")
    return submission_dict(submission)


@router.get("/assignment/{assignment_id}")
async def assignment_submissions(
    assignment_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_SUBMISSIONS, "list")
    assignment = await get_or_404(db, Assignment, assignment_id, "Assignment")
    ensure_teaches(await resolve_actor(db, identity), assignment.course, RESOURCE_SUBMISSIONS, "list")
    r = await db.execute(
        select(AssignmentSubmission)
        .where(AssignmentSubmission.assignment_id == assignment.id)
        .order_by(AssignmentSubmission.submission_date)
    )
    return [submission_dict(s) for s in r.scalars().all()]


@router.get("/{submission_id}")
async def get_submission(
    submission_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_SUBMISSIONS, "read")
    submission = await get_or_404(db, AssignmentSubmission, submission_id, "Submission")
    actor = await resolve_actor(db, identity)
    ensure_can_view_student_record(
        actor, submission.student_id, submission.assignment.course, RESOURCE_SUBMISSIONS, submission.id
    )
    return submission_dict(submission)


@router.post("", status_code=201)
async def submit(body: SubmissionCreate, identity: IdentityScope = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    enforce_role(identity, RESOURCE_SUBMISSIONS, "create")
    student = await current_student(db, identity)
    assignment = await guard_submission_create(db, student, body.assignment_id)
    submission = AssignmentSubmission(
        assignment=assignment,
        student=student,
        content=body.content,
        status=SubmissionStatus.submitted.value,
    )
    db.add(submission)
    await commit_or_conflict(db, "You have already submitted this assignment")
    audit_allowed(identity, "create", RESOURCE_SUBMISSIONS, submission.id)
    return submission_dict(submission)


@router.put("/{submission_id}", status_code=204)
async def update_submission(
    submission_id: int,
    body: SubmissionUpdate,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_SUBMISSIONS, "update")
    submission = await get_or_404(db, AssignmentSubmission, submission_id, "Submission")
    ensure_self(identity, submission.student.user_id, RESOURCE_SUBMISSIONS, "update")
    guard_submission_window(submission.assignment)
    if body.content is not None:
        submission.content = body.content
    await db.commit()
    audit_allowed(identity, "update", RESOURCE_SUBMISSIONS, submission.id)


@router.put("/{submission_id}/grade")
async def grade_submission(
    submission_id: int,
    body: SubmissionGrade,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    Score a submission and record the matching Grade row.

    The (student, course, assignment) Grade is created on first grading and
    updated afterwards; its letter is derived from the score unless one is given.
    Grading is allowed after the due date.
    """
    enforce_role(identity, RESOURCE_SUBMISSIONS, "grade")
    submission = await get_or_404(db, AssignmentSubmission, submission_id, "Submission")
    assignment = submission.assignment
    actor = await resolve_actor(db, identity)
    ensure_teaches(actor, assignment.course, RESOURCE_SUBMISSIONS, "grade")

    score = body.score if body.score is not None else submission.score
    if score is None:
        raise ValidationFailed("score is required")
    submission.score = score
    if body.feedback is not None:
        submission.feedback = body.feedback
    submission.status = SubmissionStatus.graded.value

    teacher = actor.teacher if isinstance(actor, TeacherActor) else None
    r = await db.execute(
        select(Grade).where(
            Grade.student_id == submission.student_id,
            Grade.course_id == assignment.course_id,
            Grade.assignment_id == assignment.id,
        )
    )
    grade = r.scalars().first()
    if grade is None:
        grade = Grade(student=submission.student, course=assignment.course, assignment=assignment)
        db.add(grade)
    grade.score = score
    grade.grade_letter = resolve_letter(score, body.grade_letter)
    grade.comments = submission.feedback
    grade.graded_by_teacher = teacher
    grade.graded_at = utcnow()
    await db.commit()
    logger.info("Submission %s graded %s (%s)", submission.id, score, grade.grade_letter)
    audit_allowed(identity, "grade", RESOURCE_SUBMISSIONS, submission.id)
    return grade_dict(grade)


@router.delete("/{submission_id}", status_code=204)
async def delete_submission(
    submission_id: int,
    identity: IdentityScope = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    enforce_role(identity, RESOURCE_SUBMISSIONS, "delete")
    submission = await get_or_404(db, AssignmentSubmission, submission_id, "Submission")
    ensure_self(identity, submission.student.user_id, RESOURCE_SUBMISSIONS, "delete")
    guard_submission_window(submission.assignment)
    await db.delete(submission)
    await db.commit()
    audit_allowed(identity, "delete", RESOURCE_SUBMISSIONS, submission_id)
