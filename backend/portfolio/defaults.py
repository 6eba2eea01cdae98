"""Compiled-in content served when neither the store nor the disk cache answers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class IconName(StrEnum):
    award = "FaAward"
    brain = "FaBrain"
    cloud = "FaCloud"
    code = "FaCode"
    database = "FaDatabase"
    lightbulb = "FaLightbulb"
    balance_scale = "FaBalanceScale"
    sitemap = "FaSitemap"
    truck = "FaTruck"
    work = "CgWorkAlt"


PERSONAL_INFO: dict[str, Any] = {
    "cvLink": "https://example.com/cv.pdf",
    "introText": "Hey, welcome to my portfolio.\nA data & digital strategist, consultant and system developer.",
    "aboutText": (
        "Digital strategist, consultant and system developer with a background in "
        "engineering and applied computing, building software, cloud and data "
        "solutions that streamline operations and drive growth."
    ),
    "contactEmail": "hello@example.com",
    "linkedInUrl": "https://www.linkedin.com/",
    "githubUrl": "https://github.com/",
}

EXPERIENCES: tuple[dict[str, Any], ...] = (
    {
        "title": "AI Feedback Evaluator",
        "location": "Remote, Freelance",
        "description": (
            "Reviewed AI-generated responses for accuracy, relevance and verbosity "
            "to improve conversational model quality."
        ),
        "icon": IconName.brain,
        "date": "01/2024 - Present",
    },
    {
        "title": "Digital Strategist",
        "location": "Manchester, UK",
        "description": (
            "Developed digital strategies across e-commerce, partnerships and "
            "subscriptions and led the move to a hybrid operating model."
        ),
        "icon": IconName.work,
        "date": "01/2023 - 01/2024",
    },
    {
        "title": "Junior System Engineer",
        "location": "Cairo, Egypt",
        "description": (
            "Improved IT infrastructure, ran a developer training programme and "
            "delivered cloud solutions that lowered costs and raised uptime."
        ),
        "icon": IconName.cloud,
        "date": "06/2021 - 06/2022",
    },
)

PROJECTS: tuple[dict[str, Any], ...] = (
    {
        "title": "Cloud of Things Solution for Smart Parking Management",
        "description": (
            "Scalable cloud-of-things platform for smart parking with real-time "
            "data processing on a serverless architecture."
        ),
        "tags": ["React", "Node.js", "MongoDB", "Azure", "IoT", "Serverless"],
        "imageUrl": "/cloud-of-things.png",
    },
    {
        "title": "Database and Big Data Modelling for Digital Migration Company",
        "description": "Optimised ERD schema for storage, retrieval and analysis during a digital migration.",
        "tags": ["SQL", "Data Modelling", "ERD", "Big Data", "ETL"],
        "imageUrl": "/digital-migration.png",
    },
    {
        "title": "Cloud-Based Hybrid Migration Software Development using Azure",
        "description": "Django web application integrated with Azure services and governance tooling.",
        "tags": ["Python", "Django", "Azure", "DevOps"],
        "imageUrl": "/azure-hybrid.jpeg",
    },
    {
        "title": "E-commerce Store Development",
        "description": "Online store built and marketed end to end.",
        "tags": ["HTML", "CSS", "Shopify", "SEO"],
        "imageUrl": "/ecommerce.png",
    },
)

SKILLS: dict[str, list[str]] = {
    "Programming Languages & Frameworks": [
        "Python",
        "TypeScript",
        "JavaScript",
        "C#",
        "Django",
        "Flask",
        "React",
        "Node.js",
    ],
    "Cloud Computing & Services": [
        "Azure",
        "AWS",
        "GCP",
        "Docker",
        "Kubernetes",
        "Terraform",
    ],
    "Data Analysis & Visualization": [
        "NumPy",
        "Pandas",
        "Scikit-learn",
        "Power BI",
        "Tableau",
    ],
}

ACHIEVEMENTS: tuple[dict[str, Any], ...] = (
    {
        "title": "Microsoft Azure Certifications",
        "description": "Azure cloud services design and implementation.",
        "Icon": IconName.cloud,
        "certificateUrl": "/azure-certifications.png",
    },
    {
        "title": "Google Data Analytics Professional Certificate",
        "description": "Data collection, analysis and visualisation for decision making.",
        "Icon": IconName.code,
        "certificateUrl": "/google-data-analytics-certificate2.png",
    },
    {
        "title": "AI Foundations: Machine Learning Certificate",
        "description": "Foundations of AI and machine learning techniques.",
        "Icon": IconName.brain,
        "certificateUrl": "/ai-foundations-machine-learning-certificate.png",
    },
)

MENTORSHIP: tuple[dict[str, Any], ...] = (
    {
        "title": "Accenture Job Simulation Experience",
        "description": "Data analytics and developer technology simulations.",
        "icon": "🧠",
        "imageUrl": "/accenture.png",
    },
)
