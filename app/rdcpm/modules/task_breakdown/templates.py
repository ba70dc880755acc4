"""
Static task templates keyed by project type.

Each task carries a base estimate, complexity, priority and risk (0-100); the
analyzer adjusts these per project before grouping tasks into phases.
"""

TEMPLATES = {
    "construction_project": [
        {
            "id": "site_survey",
            "name": "Site Survey & Analysis",
            "description": "Conduct comprehensive site survey, soil testing, and environmental assessment",
            "estimatedDays": 5,
            "complexity": "high",
            "priority": "high",
            "dependencies": [],
            "riskLevel": 25,
            "category": "Planning",
            "skills": ["Civil Engineering", "Surveying", "Environmental Assessment"],
            "deliverables": ["Site Survey Report", "Soil Test Results", "Environmental Assessment"]
        },
        {
            "id": "permits_approvals",
            "name": "Permits & Regulatory Approvals",
            "description": "Obtain all necessary building permits, zoning approvals, and regulatory clearances",
            "estimatedDays": 15,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["site_survey"],
            "riskLevel": 40,
            "category": "Planning",
            "skills": ["Regulatory Compliance", "Permit Processing", "Legal Documentation"],
            "deliverables": ["Building Permits", "Zoning Approvals", "Regulatory Clearances"]
        },
        {
            "id": "architectural_design",
            "name": "Architectural Design & Engineering",
            "description": "Develop detailed architectural plans, structural engineering, and MEP systems design",
            "estimatedDays": 20,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["site_survey"],
            "riskLevel": 30,
            "category": "Design",
            "skills": ["Architecture", "Structural Engineering", "MEP Design"],
            "deliverables": ["Architectural Plans", "Structural Drawings", "MEP Systems Design"]
        },
        {
            "id": "procurement",
            "name": "Material Procurement & Vendor Selection",
            "description": "Source and procure construction materials, equipment, and select contractors",
            "estimatedDays": 10,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["architectural_design"],
            "riskLevel": 35,
            "category": "Procurement",
            "skills": ["Procurement", "Vendor Management", "Cost Estimation"],
            "deliverables": ["Material Contracts", "Vendor Agreements", "Procurement Schedule"]
        },
        {
            "id": "site_preparation",
            "name": "Site Preparation & Excavation",
            "description": "Clear site, excavate foundation, and prepare construction area",
            "estimatedDays": 8,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["permits_approvals", "procurement"],
            "riskLevel": 30,
            "category": "Construction",
            "skills": ["Excavation", "Site Preparation", "Heavy Equipment Operation"],
            "deliverables": ["Prepared Site", "Foundation Excavation", "Access Roads"]
        },
        {
            "id": "foundation_work",
            "name": "Foundation Construction",
            "description": "Pour concrete foundation, install rebar, and complete foundation systems",
            "estimatedDays": 12,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["site_preparation"],
            "riskLevel": 35,
            "category": "Construction",
            "skills": ["Concrete Work", "Rebar Installation", "Foundation Systems"],
            "deliverables": ["Concrete Foundation", "Foundation Systems", "Waterproofing"]
        },
        {
            "id": "structural_framing",
            "name": "Structural Framing & Roof",
            "description": "Erect structural steel/concrete frame, install roofing system",
            "estimatedDays": 15,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["foundation_work"],
            "riskLevel": 40,
            "category": "Construction",
            "skills": ["Structural Framing", "Roofing", "Crane Operation"],
            "deliverables": ["Structural Frame", "Roofing System", "Weather Protection"]
        },
        {
            "id": "mep_installation",
            "name": "MEP Systems Installation",
            "description": "Install mechanical, electrical, and plumbing systems",
            "estimatedDays": 18,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["structural_framing"],
            "riskLevel": 35,
            "category": "Construction",
            "skills": ["Electrical Work", "Plumbing", "HVAC Installation"],
            "deliverables": ["Electrical Systems", "Plumbing Systems", "HVAC Systems"]
        },
        {
            "id": "interior_finishing",
            "name": "Interior Finishing & Fit-out",
            "description": "Install drywall, flooring, fixtures, and complete interior finishes",
            "estimatedDays": 20,
            "complexity": "medium",
            "priority": "medium",
            "dependencies": ["mep_installation"],
            "riskLevel": 25,
            "category": "Construction",
            "skills": ["Interior Finishing", "Flooring", "Fixture Installation"],
            "deliverables": ["Finished Interiors", "Flooring", "Lighting Fixtures"]
        },
        {
            "id": "exterior_finishing",
            "name": "Exterior Finishing & Landscaping",
            "description": "Complete exterior finishes, landscaping, and site improvements",
            "estimatedDays": 10,
            "complexity": "medium",
            "priority": "medium",
            "dependencies": ["interior_finishing"],
            "riskLevel": 20,
            "category": "Construction",
            "skills": ["Exterior Finishing", "Landscaping", "Site Work"],
            "deliverables": ["Exterior Finishes", "Landscaping", "Parking Areas"]
        },
        {
            "id": "testing_commissioning",
            "name": "Systems Testing & Commissioning",
            "description": "Test all systems, conduct safety inspections, and commission building systems",
            "estimatedDays": 5,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["exterior_finishing"],
            "riskLevel": 30,
            "category": "Testing",
            "skills": ["Systems Testing", "Safety Inspection", "Commissioning"],
            "deliverables": ["Test Reports", "Safety Certificates", "Commissioning Documents"]
        },
        {
            "id": "final_inspection",
            "name": "Final Inspection & Handover",
            "description": "Conduct final inspections, obtain certificates of occupancy, and handover to client",
            "estimatedDays": 3,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["testing_commissioning"],
            "riskLevel": 25,
            "category": "Completion",
            "skills": ["Inspection", "Documentation", "Project Handover"],
            "deliverables": ["Certificate of Occupancy", "As-Built Drawings", "Operations Manual"]
        }
    ],

    "e_commerce": [
        {
            "id": "requirements",
            "name": "E-commerce Requirements Analysis",
            "description": "Define business requirements, user stories, and technical specifications for e-commerce platform",
            "estimatedDays": 4,
            "complexity": "high",
            "priority": "high",
            "dependencies": [],
            "riskLevel": 25,
            "category": "Planning",
            "skills": ["Business Analysis", "E-commerce Knowledge", "Requirements Gathering"],
            "deliverables": ["Requirements Document", "User Stories", "Technical Specifications"]
        },
        {
            "id": "ui_design",
            "name": "E-commerce UI/UX Design",
            "description": "Design user interface for shopping experience, product pages, checkout flow, and admin dashboard",
            "estimatedDays": 6,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["requirements"],
            "riskLevel": 30,
            "category": "Design",
            "skills": ["UI/UX Design", "E-commerce Design", "User Experience"],
            "deliverables": ["Wireframes", "Mockups", "Design System", "Prototypes"]
        },
        {
            "id": "payment_integration",
            "name": "Payment Gateway Integration",
            "description": "Integrate payment processing systems and ensure secure transaction handling",
            "estimatedDays": 5,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["requirements"],
            "riskLevel": 45,
            "category": "Development",
            "skills": ["Payment Integration", "Security", "API Development"],
            "deliverables": ["Payment Integration", "Security Measures", "Testing Suite"]
        },
        {
            "id": "backend_development",
            "name": "E-commerce Backend Development",
            "description": "Develop server-side logic for products, orders, inventory, and user management",
            "estimatedDays": 12,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["requirements"],
            "riskLevel": 40,
            "category": "Development",
            "skills": ["Backend Development", "Database Design", "API Development"],
            "deliverables": ["Backend Services", "Database Schema", "API Endpoints"]
        },
        {
            "id": "frontend_development",
            "name": "E-commerce Frontend Development",
            "description": "Develop responsive web frontend with product catalog, cart, and checkout functionality",
            "estimatedDays": 10,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["ui_design", "backend_development"],
            "riskLevel": 35,
            "category": "Development",
            "skills": ["Frontend Development", "React/Vue/Angular", "JavaScript"],
            "deliverables": ["E-commerce Website", "Product Catalog", "Shopping Cart"]
        },
        {
            "id": "testing",
            "name": "E-commerce Testing & QA",
            "description": "Comprehensive testing including payment flows, security, and performance testing",
            "estimatedDays": 5,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["frontend_development", "payment_integration"],
            "riskLevel": 35,
            "category": "Testing",
            "skills": ["Testing", "Security Testing", "Performance Testing"],
            "deliverables": ["Test Cases", "Security Audit", "Performance Reports"]
        },
        {
            "id": "deployment",
            "name": "E-commerce Deployment & Launch",
            "description": "Deploy to production with SSL certificates, monitoring, and backup systems",
            "estimatedDays": 3,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["testing"],
            "riskLevel": 30,
            "category": "Deployment",
            "skills": ["DevOps", "SSL Configuration", "Monitoring"],
            "deliverables": ["Production Website", "SSL Certificates", "Monitoring Setup"]
        }
    ],

    "ai_ml_project": [
        {
            "id": "requirements",
            "name": "AI/ML Requirements Analysis",
            "description": "Define ML objectives, data requirements, and success metrics",
            "estimatedDays": 5,
            "complexity": "high",
            "priority": "high",
            "dependencies": [],
            "riskLevel": 30,
            "category": "Planning",
            "skills": ["Data Science", "ML Engineering", "Business Analysis"],
            "deliverables": ["ML Requirements", "Success Metrics", "Data Strategy"]
        },
        {
            "id": "data_collection",
            "name": "Data Collection & Preparation",
            "description": "Gather, clean, and prepare datasets for machine learning",
            "estimatedDays": 8,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["requirements"],
            "riskLevel": 40,
            "category": "Data Engineering",
            "skills": ["Data Engineering", "Data Cleaning", "ETL Processes"],
            "deliverables": ["Clean Dataset", "Data Pipeline", "Data Documentation"]
        },
        {
            "id": "model_development",
            "name": "ML Model Development",
            "description": "Develop and train machine learning models",
            "estimatedDays": 12,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["data_collection"],
            "riskLevel": 45,
            "category": "ML Development",
            "skills": ["Machine Learning", "Python", "ML Frameworks"],
            "deliverables": ["Trained Models", "Model Evaluation", "Model Documentation"]
        },
        {
            "id": "model_deployment",
            "name": "Model Deployment & Integration",
            "description": "Deploy ML models to production environment with API endpoints",
            "estimatedDays": 6,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["model_development"],
            "riskLevel": 40,
            "category": "MLOps",
            "skills": ["MLOps", "API Development", "Model Serving"],
            "deliverables": ["Production Model", "API Endpoints", "Monitoring"]
        },
        {
            "id": "testing",
            "name": "ML Testing & Validation",
            "description": "Validate model performance and conduct A/B testing",
            "estimatedDays": 4,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["model_deployment"],
            "riskLevel": 30,
            "category": "Testing",
            "skills": ["ML Testing", "Statistical Analysis", "A/B Testing"],
            "deliverables": ["Validation Reports", "Performance Metrics", "Test Results"]
        }
    ],

    "mobile_app": [
        {
            "id": "requirements",
            "name": "Requirements Analysis",
            "description": "Gather and analyze user requirements, create user stories",
            "estimatedDays": 3,
            "complexity": "medium",
            "priority": "high",
            "dependencies": [],
            "riskLevel": 20,
            "category": "Planning",
            "skills": ["Business Analysis", "Requirements Gathering"],
            "deliverables": ["Requirements Document", "User Stories"]
        },
        {
            "id": "ui_design",
            "name": "UI/UX Design",
            "description": "Create wireframes, mockups, and user interface designs",
            "estimatedDays": 5,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["requirements"],
            "riskLevel": 30,
            "category": "Design",
            "skills": ["UI/UX Design", "Prototyping"],
            "deliverables": ["Wireframes", "Mockups", "Design System"]
        },
        {
            "id": "backend_api",
            "name": "Backend API Development",
            "description": "Develop server-side APIs and database integration",
            "estimatedDays": 8,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["requirements"],
            "riskLevel": 40,
            "category": "Development",
            "skills": ["Backend Development", "API Design", "Database"],
            "deliverables": ["API Endpoints", "Database Schema", "API Documentation"]
        },
        {
            "id": "frontend_development",
            "name": "Frontend Development",
            "description": "Develop mobile app frontend with UI components",
            "estimatedDays": 10,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["ui_design", "backend_api"],
            "riskLevel": 35,
            "category": "Development",
            "skills": ["Mobile Development", "React Native", "JavaScript"],
            "deliverables": ["Mobile App", "UI Components", "Navigation"]
        },
        {
            "id": "testing",
            "name": "Testing & QA",
            "description": "Comprehensive testing including unit, integration, and user testing",
            "estimatedDays": 4,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["frontend_development"],
            "riskLevel": 25,
            "category": "Testing",
            "skills": ["Testing", "QA", "Bug Tracking"],
            "deliverables": ["Test Cases", "Bug Reports", "Quality Assurance"]
        },
        {
            "id": "deployment",
            "name": "Deployment & Launch",
            "description": "Deploy to app stores and production environment",
            "estimatedDays": 2,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["testing"],
            "riskLevel": 30,
            "category": "Deployment",
            "skills": ["DevOps", "App Store Management"],
            "deliverables": ["Production App", "App Store Listings"]
        }
    ],
    
    "web_application": [
        {
            "id": "requirements",
            "name": "Requirements Analysis",
            "description": "Gather and analyze web application requirements",
            "estimatedDays": 2,
            "complexity": "medium",
            "priority": "high",
            "dependencies": [],
            "riskLevel": 15,
            "category": "Planning",
            "skills": ["Business Analysis", "Requirements Gathering"],
            "deliverables": ["Requirements Document", "User Stories"]
        },
        {
            "id": "ui_design",
            "name": "UI/UX Design",
            "description": "Create web application designs and user experience flows",
            "estimatedDays": 4,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["requirements"],
            "riskLevel": 25,
            "category": "Design",
            "skills": ["UI/UX Design", "Web Design"],
            "deliverables": ["Wireframes", "Mockups", "Design System"]
        },
        {
            "id": "backend_development",
            "name": "Backend Development",
            "description": "Develop server-side logic, APIs, and database integration",
            "estimatedDays": 6,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["requirements"],
            "riskLevel": 35,
            "category": "Development",
            "skills": ["Backend Development", "API Design", "Database"],
            "deliverables": ["Backend Services", "API Endpoints", "Database"]
        },
        {
            "id": "frontend_development",
            "name": "Frontend Development",
            "description": "Develop responsive web frontend with modern frameworks",
            "estimatedDays": 7,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["ui_design", "backend_development"],
            "riskLevel": 30,
            "category": "Development",
            "skills": ["Frontend Development", "React", "JavaScript"],
            "deliverables": ["Web Application", "Responsive UI", "User Interactions"]
        },
        {
            "id": "testing",
            "name": "Testing & QA",
            "description": "Comprehensive testing including cross-browser compatibility",
            "estimatedDays": 3,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["frontend_development"],
            "riskLevel": 20,
            "category": "Testing",
            "skills": ["Testing", "QA", "Cross-browser Testing"],
            "deliverables": ["Test Cases", "Bug Reports", "Performance Testing"]
        },
        {
            "id": "deployment",
            "name": "Deployment & Launch",
            "description": "Deploy to production servers and configure hosting",
            "estimatedDays": 1,
            "complexity": "low",
            "priority": "high",
            "dependencies": ["testing"],
            "riskLevel": 25,
            "category": "Deployment",
            "skills": ["DevOps", "Web Hosting"],
            "deliverables": ["Production Website", "Hosting Configuration"]
        }
    ],
    
    "backend_service": [
        {
            "id": "requirements",
            "name": "API Requirements Analysis",
            "description": "Define API specifications and integration requirements",
            "estimatedDays": 2,
            "complexity": "medium",
            "priority": "high",
            "dependencies": [],
            "riskLevel": 15,
            "category": "Planning",
            "skills": ["API Design", "Requirements Analysis"],
            "deliverables": ["API Specification", "Integration Requirements"]
        },
        {
            "id": "database_design",
            "name": "Database Design",
            "description": "Design database schema and data models",
            "estimatedDays": 3,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["requirements"],
            "riskLevel": 25,
            "category": "Design",
            "skills": ["Database Design", "Data Modeling"],
            "deliverables": ["Database Schema", "Data Models", "Relationships"]
        },
        {
            "id": "api_development",
            "name": "API Development",
            "description": "Develop RESTful APIs with proper error handling",
            "estimatedDays": 8,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["database_design"],
            "riskLevel": 35,
            "category": "Development",
            "skills": ["API Development", "Backend Programming"],
            "deliverables": ["API Endpoints", "Error Handling", "API Documentation"]
        },
        {
            "id": "authentication",
            "name": "Authentication & Security",
            "description": "Implement user authentication and security measures",
            "estimatedDays": 3,
            "complexity": "high",
            "priority": "high",
            "dependencies": ["api_development"],
            "riskLevel": 40,
            "category": "Security",
            "skills": ["Security", "Authentication", "Authorization"],
            "deliverables": ["Auth System", "Security Measures", "User Management"]
        },
        {
            "id": "testing",
            "name": "API Testing",
            "description": "Comprehensive API testing including load testing",
            "estimatedDays": 3,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["authentication"],
            "riskLevel": 20,
            "category": "Testing",
            "skills": ["API Testing", "Load Testing", "Performance Testing"],
            "deliverables": ["Test Suites", "Performance Reports", "API Validation"]
        },
        {
            "id": "deployment",
            "name": "Service Deployment",
            "description": "Deploy API service to production with monitoring",
            "estimatedDays": 2,
            "complexity": "medium",
            "priority": "high",
            "dependencies": ["testing"],
            "riskLevel": 30,
            "category": "Deployment",
            "skills": ["DevOps", "Service Deployment", "Monitoring"],
            "deliverables": ["Production API", "Monitoring Setup", "Health Checks"]
        }
    ]
}

DEFAULT_TEMPLATE = "mobile_app"
