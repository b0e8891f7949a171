# Academia - seed database with sample data
import asyncio
import logging
from datetime import timedelta

from sqlalchemy import select

from auth import hash_password
from config import get_settings
from . import database
from .models import Assignment, Course, Enrollment, Notification, Role, Student, Teacher, User, utcnow

logger = logging.getLogger(__name__)


async def seed():
    settings = get_settings()
    await database.init_db(settings.database_url)
    try:
        async with database.async_session() as session:
            # Skip when the sample teacher is already there
            r = await session.execute(select(User).where(User.username == "teacher1"))
            if r.scalar_one_or_none():
                logger.info("Database already seeded. Skip.")
                return

            r = await session.execute(select(User).where(User.username == settings.admin_username))
            if r.scalar_one_or_none() is None:
                session.add(
                    User(
                        username=settings.admin_username,
                        password_hash=hash_password(settings.admin_password),
                        email=settings.admin_email,
                        role=Role.admin.value,
                    )
                )

            teacher = Teacher(
                user=User(
                    username="teacher1",
                    password_hash=hash_password("teacher123"),
                    email="teacher1@school.com",
                    role=Role.teacher.value,
                ),
                teacher_number="T001",
                first_name="Zhang",
                last_name="Teacher",
                department="Computer Science",
                title="Associate Professor",
            )
            student = Student(
                user=User(
                    username="student1",
                    password_hash=hash_password("student123"),
                    email="student1@school.com",
                    role=Role.student.value,
                ),
                student_number="S001",
                first_name="Li",
                last_name="Student",
                major="Computer Science and Technology",
                class_name="CS2021-1",
            )
            course = Course(
                course_code="CS101",
                course_name="Introduction to Computer Science",
                description="Basic computer science course",
                credits=3,
                max_students=50,
                schedule="Monday 8:00-9:40",
                location="Building A Room 101",
                teacher=teacher,
            )
            session.add_all([teacher, student, course])
            session.add_all([
                Enrollment(student=student, course=course),
                Assignment(
                    course=course,
                    title="First Assignment",
                    description="Complete the basic programming exercises",
                    due_date=utcnow() + timedelta(days=7),
                    max_score=100,
                    weight=0.3,
                ),
                Notification(
                    title="Welcome to Academia",
                    content="Welcome to the academic administration system. Please explore the features available to you.",
                    type="General",
                    target_role=Role.student.value,
                ),
            ])
            await session.commit()
    finally:
        await database.dispose_db()
    logger.info("Seed completed. Sample logins: teacher1/teacher123, student1/student123")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
