# Academia - resource descriptors (role gates per action)
from database.models import Role
from .models import ResourceDescriptor

# Resource IDs used in policy
RESOURCE_USERS = "users"
RESOURCE_STUDENTS = "students"
RESOURCE_TEACHERS = "teachers"
RESOURCE_COURSES = "courses"
RESOURCE_ENROLLMENTS = "enrollments"
RESOURCE_ASSIGNMENTS = "assignments"
RESOURCE_SUBMISSIONS = "assignment_submissions"
RESOURCE_GRADES = "grades"
RESOURCE_NOTIFICATIONS = "notifications"
RESOURCE_ATTENDANCE = "attendance"
RESOURCE_AUDIT = "audit"

ANY = [Role.admin, Role.teacher, Role.student]
STAFF = [Role.admin, Role.teacher]
ADMIN = [Role.admin]
TEACHER = [Role.teacher]
STUDENT = [Role.student]

# Coarse role gate; the ownership rule named here is checked per instance in policy.py
RESOURCE_DESCRIPTORS: dict[str, ResourceDescriptor] = {
    RESOURCE_USERS: ResourceDescriptor(
        resource_id=RESOURCE_USERS,
        ownership="role",
        allowed_roles={"reset_password": ADMIN},
    ),
    RESOURCE_STUDENTS: ResourceDescriptor(
        resource_id=RESOURCE_STUDENTS,
        ownership="self",
        allowed_roles={
            "list": STAFF,
            "read": ANY,
            "create": STAFF,
            "create_batch": ADMIN,
            "update": ANY,
            "deactivate": ADMIN,
            "delete": ADMIN,
            "statistics": ADMIN,
            "read_own": STUDENT,
            "read_taught": TEACHER,
            "users": ADMIN,
        },
    ),
    RESOURCE_TEACHERS: ResourceDescriptor(
        resource_id=RESOURCE_TEACHERS,
        ownership="role",
        allowed_roles={
            "list": ADMIN,
            "read": ADMIN,
            "create": ADMIN,
            "update": ADMIN,
            "deactivate": ADMIN,
            "delete": ADMIN,
            "read_taught": TEACHER,
            "users": ADMIN,
        },
    ),
    RESOURCE_COURSES: ResourceDescriptor(
        resource_id=RESOURCE_COURSES,
        ownership="relationship",
        allowed_roles={"read": ANY, "create": STAFF, "update": STAFF, "delete": ADMIN},
    ),
    RESOURCE_ENROLLMENTS: ResourceDescriptor(
        resource_id=RESOURCE_ENROLLMENTS,
        ownership="relationship",
        allowed_roles={
            "list": ADMIN,
            "list_course": STAFF,
            "read": ANY,
            "read_own": STUDENT,
            "create": STUDENT,
            "update": STAFF,
            "delete": STUDENT,
        },
    ),
    RESOURCE_ASSIGNMENTS: ResourceDescriptor(
        resource_id=RESOURCE_ASSIGNMENTS,
        ownership="relationship",
        allowed_roles={
            "read": ANY,
            "read_taught": TEACHER,
            "read_own": STUDENT,
            "create": STAFF,
            "update": STAFF,
            "delete": STAFF,
        },
    ),
    RESOURCE_SUBMISSIONS: ResourceDescriptor(
        resource_id=RESOURCE_SUBMISSIONS,
        ownership="relationship",
        allowed_roles={
            "list": STAFF,
            "read": ANY,
            "read_own": STUDENT,
            "create": STUDENT,
            "update": STUDENT,
            "delete": STUDENT,
            "grade": STAFF,
        },
    ),
    RESOURCE_GRADES: ResourceDescriptor(
        resource_id=RESOURCE_GRADES,
        ownership="relationship",
        allowed_roles={
            "list": ANY,
            "read": ANY,
            "read_taught": TEACHER,
            "create": STAFF,
            "update": STAFF,
            "delete": STAFF,
        },
    ),
    RESOURCE_NOTIFICATIONS: ResourceDescriptor(
        resource_id=RESOURCE_NOTIFICATIONS,
        ownership="self",
        allowed_roles={
            "list": ADMIN,
            "read": ANY,
            "read_own": ANY,
            "read_published": TEACHER,
            "create": STAFF,
            "update": STAFF,
            "mark_read": ANY,
            "delete": ADMIN,
        },
    ),
    RESOURCE_ATTENDANCE: ResourceDescriptor(
        resource_id=RESOURCE_ATTENDANCE,
        ownership="relationship",
        allowed_roles={
            "list_course": STAFF,
            "read_own": STUDENT,
            "create": STAFF,
            "update": STAFF,
            "delete": STAFF,
        },
    ),
    RESOURCE_AUDIT: ResourceDescriptor(
        resource_id=RESOURCE_AUDIT,
        ownership="role",
        allowed_roles={"read": ADMIN},
    ),
}
