"""
Demo data for the mentorship program: mentors (admins) and their mentees
"""

DEMO_ADMINS = [
    {"admin_id": "mentor-web", "fullname": "Ananya Iyer", "domain": "Web Development"},
    {"admin_id": "mentor-ml", "fullname": "Rohan Mehta", "domain": "Machine Learning"},
]

DEMO_USERS = [
    {
        "user_id": "TSIG-001",
        "fullname": "Deepika Patel",
        "domain": "Web Development",
        "mentor": "mentor-web",
        "password": "password123",
    },
    {
        "user_id": "TSIG-002",
        "fullname": "Vikram Reddy",
        "domain": "Web Development",
        "mentor": "mentor-web",
        "password": "password123",
    },
    {
        "user_id": "TSIG-003",
        "fullname": "Kavya Nair",
        "domain": "Machine Learning",
        "mentor": "mentor-ml",
        "password": "password123",
    },
    {
        "user_id": "TSIG-004",
        "fullname": "Arjun Singh",
        "domain": "Machine Learning",
        "mentor": "mentor-ml",
        "password": "password123",
    },
]

DEMO_TASKS = [
    {
        "admin_id": "mentor-web",
        "user_id": "TSIG-001",
        "title": "Build a landing page",
        "description": "Responsive landing page for the club, deployed on any static host.",
        "resources": {"MDN": "https://developer.mozilla.org/en-US/docs/Learn/CSS"},
    },
    {
        "admin_id": "mentor-web",
        "user_id": "TSIG-002",
        "title": "REST API basics",
        "description": "Write a CRUD API for a todo list and submit the repository as a zip.",
        "resources": {"FastAPI tutorial": "https://fastapi.tiangolo.com/tutorial/"},
    },
    {
        "admin_id": "mentor-ml",
        "user_id": "TSIG-003",
        "title": "Linear regression from scratch",
        "description": "Implement gradient descent with numpy and report the loss curve.",
        "resources": {"Notes": "https://cs229.stanford.edu/main_notes.pdf"},
    },
]
