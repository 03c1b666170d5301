"""
MJML Email Templates
Customer-facing templates for the dispatch service
"""

from datetime import datetime
from html import escape
from typing import Optional

# Dispatch Bros theme - Slate/Indigo
THEME = {
    "primary": "#111827",
    "accent": "#1e3a8a",
    "accent_light": "#eef2ff",
    "background": "#f5f6f7",
    "panel_bg": "#f9fafb",
    "text_primary": "#111827",
    "text_secondary": "#4b5563",
    "text_muted": "#9ca3af",
    "border": "#e5e7eb",
}

COMPANY_NAME = "Dispatch Bros"


def get_base_template(title: str, preview_text: str, content_sections: str) -> str:
    """Base MJML template wrapper for all emails"""
    year = datetime.now().year

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="'Segoe UI', Roboto, Arial, sans-serif" />
          <mj-text font-size="15px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Header -->
        <mj-section background-color="{THEME['primary']}" padding="22px 20px">
          <mj-column>
            <mj-text align="center" font-size="24px" font-weight="600" color="#ffffff" padding="0">
              {COMPANY_NAME}
            </mj-text>
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="28px 28px 36px 28px">
          <mj-column>
            <mj-text font-size="22px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 12px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        <!-- Footer -->
        <mj-section background-color="#f3f4f6" padding="12px 20px">
          <mj-column>
            <mj-text align="center" font-size="12px" color="{THEME['text_muted']}" padding="0">
              © {year} {COMPANY_NAME}. All rights reserved.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def job_confirmation_template(
    customer_name: str,
    service_address: str,
    customer_phone: str,
    scheduled_date: str,
    time_label: Optional[str],
    job_description: Optional[str],
    technician_name: str,
    technician_phone: str,
) -> str:
    """Job confirmation sent to the customer once a technician is assigned"""
    content = f"""
    <mj-text padding="0 0 20px 0">
      Your booking has been successfully scheduled. Below are your job and technician details:
    </mj-text>

    <mj-text container-background-color="{THEME['panel_bg']}" padding="18px">
      <strong style="color: {THEME['text_primary']};">Job Details</strong><br/>
      <strong>Customer:</strong> {escape(customer_name)}<br/>
      <strong>Address:</strong> {escape(service_address)}<br/>
      <strong>Phone:</strong> {escape(customer_phone)}<br/>
      <strong>Schedule:</strong> {scheduled_date} ({escape(time_label or 'N/A')})<br/>
      <strong>Description:</strong> {escape(job_description or '')}
    </mj-text>

    <mj-text color="{THEME['accent']}" padding="20px 0 0 0">
      <strong>Technician Assigned</strong><br/>
      <strong>Name:</strong> {escape(technician_name)}<br/>
      <strong>Phone:</strong> {escape(technician_phone)}
    </mj-text>
    """

    return get_base_template(
        title="Your Scheduled Service Is Confirmed",
        preview_text=f"Your service on {scheduled_date} is confirmed",
        content_sections=content,
    )
