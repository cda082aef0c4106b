"""Render one item record into a self-contained HTML detail page.

Each page carries:
  - Product Info : ID, category, batch, brand, supplier, item expiry, stock
  - Purchase Info: purchased date, invoice link
  - Halal Info   : certificate availability, certificate expiry and link
  - A stock request box that composes an email to the PIC.

Expiry alerts are ``mailto:`` links to the PIC. The embedded script repeats
the expiry classification on load, so a page opened days after it was
generated still shows the right status.
"""

import html
import json
from datetime import date
from typing import Mapping, Optional
from urllib.parse import quote

from . import expiry
from .config import DEFAULT_EMAIL
from .dates import NA, format_date, parse_date
from .expiry import ExpiryStatus, classify
from .source import COLUMNS, is_http_url, resolve_certificate_url

HEADER_MAIN = "INSTANT HALAL & INVENTORY CHECKER"
HEADER_SUB = "(i-HIC)"

NOT_AVAILABLE = "<span class=\"na-value\">Not Available</span>"

# Characters encodeURIComponent leaves alone, besides letters, digits and "-_."
URI_COMPONENT_SAFE = "!~*'()"


def escape(s) -> str:
    if not s:
        return ""
    s = str(s)
    # '&' first so the entities added below are not escaped twice
    return (s.replace("&", "&amp;")
             .replace("<", "&lt;")
             .replace(">", "&gt;")
             .replace("\"", "&quot;")
             .replace("'", "&#039;"))


def encode_uri_component(s) -> str:
    return quote("" if s is None else str(s), safe=URI_COMPONENT_SAFE)


def mailto_link(email: str, subject: str, body: str) -> str:
    return f"mailto:{email}?subject={encode_uri_component(subject)}&body={encode_uri_component(body)}"


def item_alert_mailto(item: Mapping[str, Optional[str]], status: ExpiryStatus, email: str) -> str:
    name = item.get(COLUMNS["name"]) or ""
    batch = item.get(COLUMNS["batch"]) or ""
    state = "Expired" if status.is_fully_expired else "Nearly Expired"
    phrase = "already expired" if status.is_fully_expired else "nearly expired"
    return mailto_link(
        email,
        f"High Importance : {name} is {state}",
        f"Hi. The {name} with Identification Number of {batch} is {phrase}. "
        "Please do the necessary. Thank you.",
    )


def cert_alert_mailto(item: Mapping[str, Optional[str]], status: ExpiryStatus, email: str) -> str:
    name = item.get(COLUMNS["name"]) or ""
    state = "Expired" if status.is_fully_expired else "Nearly Expired"
    phrase = "already expired" if status.is_fully_expired else "nearly expired"
    return mailto_link(
        email,
        f"High Importance : {name} Halal Certificate is {state}",
        f"Hi. The {name} Halal certificate is {phrase}. Please do the necessary. Thank you.",
    )


def expiry_text(raw: Optional[str], parsed: Optional[date], status: ExpiryStatus) -> str:
    if (raw or "").strip() == NA:
        return "N/A"
    return f"{format_date(parsed)} {status.display_text}".strip()


def render_link_button(url: Optional[str], label: str) -> str:
    """Blue button for an http(s) link, or the 'Not Available' placeholder."""
    if not is_http_url(url):
        return NOT_AVAILABLE
    return f"<a href=\"{html.escape(url, quote=True)}\" class=\"btn btn-blue\">{escape(label)}</a>"


def render_alert(container_id: str, css_class: str, status: ExpiryStatus, href: str) -> str:
    # The container is always emitted so the page script can fill it on load
    if not status.alert_triggered:
        return f"<div id=\"{container_id}\" class=\"{css_class}\" hidden></div>"
    return (
        f"<div id=\"{container_id}\" class=\"{css_class}\">"
        f"<a href=\"{html.escape(href, quote=True)}\" class=\"btn btn-red\">{escape(status.alert_message)}</a>"
        "</div>"
    )


def detail_row(label: str, value_html: str, value_class: str = "", value_id: str = "") -> str:
    cls = f"detail-value {value_class}".strip()
    id_attr = f" id=\"{value_id}\"" if value_id else ""
    return (
        "<div class=\"detail-row\">"
        f"<div class=\"detail-label\">{escape(label)}:</div>"
        f"<div class=\"{cls}\"{id_attr}>{value_html}</div>"
        "</div>"
    )


def page_script_config(item: Mapping[str, Optional[str]], email: str, cert_available: bool) -> str:
    """JSON handed to the page script, safe to inline inside <script>."""
    data = {
        "email": email,
        "itemName": item.get(COLUMNS["name"]) or "",
        "itemId": item.get(COLUMNS["id"]) or "",
        "batchNo": item.get(COLUMNS["batch"]) or "",
        "itemExpiry": item.get(COLUMNS["item_expiry"]) or "",
        "certExpiry": item.get(COLUMNS["cert_expiry"]) or "",
        "certAvailable": cert_available,
        "expiredBeforeDays": expiry.EXPIRED_BEFORE_DAYS,
        "nearlyExpiredBeforeDays": expiry.NEARLY_EXPIRED_BEFORE_DAYS,
    }
    return (json.dumps(data)
            .replace("<", "\\u003c")
            .replace(">", "\\u003e")
            .replace("&", "\\u0026"))


def render_item_page(item: Mapping[str, Optional[str]],
                     contact_email: str = DEFAULT_EMAIL,
                     today: Optional[date] = None) -> str:
    raw_item_expiry = item.get(COLUMNS["item_expiry"])
    raw_cert_expiry = item.get(COLUMNS["cert_expiry"])
    item_expiry = parse_date(raw_item_expiry)
    cert_expiry = parse_date(raw_cert_expiry)
    item_status = classify(item_expiry, is_certificate=False, today=today)
    cert_status = classify(cert_expiry, is_certificate=True, today=today)

    cert_url = resolve_certificate_url(item)

    name = escape(item.get(COLUMNS["name"]))

    product_rows = [
        detail_row("Item ID", escape(item.get(COLUMNS["id"]))),
        detail_row("Category", escape(item.get(COLUMNS["category"]))),
        detail_row("Batch/GRIS No.", escape(item.get(COLUMNS["batch"]))),
        detail_row("Brand", escape(item.get(COLUMNS["brand"]))),
        detail_row("Supplier", escape(item.get(COLUMNS["supplier"]))),
        detail_row("Item Expiry Date",
                   escape(expiry_text(raw_item_expiry, item_expiry, item_status)),
                   value_class=item_status.display_class,
                   value_id="itemExpiryDate"),
        render_alert("expiryAlertContainer", "expiry-alert-container", item_status,
                     item_alert_mailto(item, item_status, contact_email)),
        detail_row("Stock Available", escape(item.get(COLUMNS["stock"]))),
    ]

    purchase_rows = [
        detail_row("Purchased Date", escape(format_date(parse_date(item.get(COLUMNS["purchased"]))))),
        detail_row("Invoice", render_link_button(item.get(COLUMNS["invoice"]), "View Invoice")),
    ]

    halal_rows = [
        detail_row("Halal Certificate",
                   "Available" if cert_url else "Not Available",
                   value_class="cert-available" if cert_url else "cert-not-available"),
    ]
    if cert_url:
        halal_rows += [
            detail_row("Certificate Expiry",
                       escape(expiry_text(raw_cert_expiry, cert_expiry, cert_status)),
                       value_class=cert_status.display_class,
                       value_id="certExpiryDate"),
            render_alert("certAlertContainer", "cert-alert-container", cert_status,
                         cert_alert_mailto(item, cert_status, contact_email)),
            detail_row("Certificate", render_link_button(cert_url, "View Certificate")),
        ]

    return (PAGE_TEMPLATE
            .replace("__DOC_TITLE__", f"i-HIC - {name} Details")
            .replace("__HEADER_MAIN__", escape(HEADER_MAIN))
            .replace("__HEADER_SUB__", escape(HEADER_SUB))
            .replace("__ITEM_NAME__", name)
            .replace("__PRODUCT_ROWS__", "\n".join(product_rows))
            .replace("__PURCHASE_ROWS__", "\n".join(purchase_rows))
            .replace("__HALAL_ROWS__", "\n".join(halal_rows))
            .replace("__PAGE_CONFIG__", page_script_config(item, contact_email, bool(cert_url)))
            )


PAGE_TEMPLATE = r"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>__DOC_TITLE__</title>
  <style>
    :root {
      --brand: #0066cc;
      --text-main: #333;
      --text-label: #555;
      --border-soft: #e0e0e0;
      --ok: #27ae60;
      --bad: #e74c3c;
      --muted: #7f8c8d;
    }
    * { box-sizing: border-box; margin: 0; padding: 0; }
    body { padding: 15px; background-color: #f5f5f5; font-family: Arial, sans-serif; }
    .container {
      max-width: 100%;
      margin: 0 auto;
      background: white;
      border-radius: 10px;
      padding: 20px;
      box-shadow: 0 2px 10px rgba(0,0,0,0.1);
    }
    .header-container { text-align: center; margin-bottom: 20px; }
    .header-main { font-family: "Century Gothic", sans-serif; color: var(--brand); font-size: 24px; font-weight: 800; letter-spacing: 0.5px; margin-bottom: 5px; }
    .header-sub { font-family: "Century Gothic", sans-serif; color: var(--brand); font-size: 20px; font-weight: 800; letter-spacing: 1px; }
    .item-name {
      font-size: 22px;
      font-weight: bold;
      text-align: center;
      margin-bottom: 25px;
      color: var(--text-main);
      padding-bottom: 10px;
      border-bottom: 2px solid var(--brand);
    }
    .info-card {
      background: white;
      border-radius: 8px;
      padding: 15px;
      box-shadow: 0 2px 8px rgba(0,0,0,0.1);
      border: 1px solid var(--border-soft);
      margin-bottom: 20px;
    }
    .card-title { font-weight: bold; color: var(--brand); margin-bottom: 15px; font-size: 18px; padding-bottom: 5px; border-bottom: 1px solid var(--border-soft); }
    .detail-row { display: flex; margin-bottom: 10px; align-items: center; padding-bottom: 10px; border-bottom: 1px solid #f0f0f0; }
    .detail-row:last-child { border-bottom: none; padding-bottom: 0; margin-bottom: 0; }
    .detail-label { font-weight: bold; width: 50%; color: var(--text-label); font-size: 16px; padding-right: 5px; }
    .detail-value { width: 50%; word-break: break-word; font-size: 16px; text-align: left; padding-left: 5px; }
    .cert-available, .valid { color: var(--ok); font-weight: bold; }
    .cert-not-available, .expired { color: var(--bad); font-weight: bold; }
    .na-value { color: var(--muted); font-style: italic; }

    .btn {
      display: inline-block;
      padding: 10px 12px;
      color: white;
      text-decoration: none;
      border-radius: 5px;
      text-align: center;
      font-size: 15px;
      border: none;
      cursor: pointer;
      width: 100%;
      margin-top: 8px;
    }
    .btn:hover { opacity: 0.9; }
    .btn-blue { background-color: #3498db; }
    .btn-green { background-color: #2ecc71; }
    .btn-purple { background-color: #9b59b6; }
    .btn-red { background-color: var(--bad); margin: 15px 0 20px 0; }
    .expiry-alert-container, .cert-alert-container { margin: 10px 0 5px 0; }

    .stock-request-box { background-color: #f8f9fa; padding: 15px; border-radius: 8px; margin-top: 20px; border: 1px solid var(--border-soft); }
    .quantity-label { display: block; margin: 10px 0 5px; font-weight: bold; color: var(--text-main); font-size: 16px; }
    .quantity-input { width: 100%; padding: 12px; margin: 10px 0; border: 1px solid #ddd; border-radius: 5px; font-size: 16px; }
    .quantity-error { color: var(--bad); font-size: 14px; min-height: 1em; }
    .back-btn { display: block; text-align: center; margin-top: 20px; color: #3498db; text-decoration: none; font-weight: bold; font-size: 16px; }

    @media (min-width: 600px) {
      .container { max-width: 600px; }
      .header-main { font-size: 26px; }
      .header-sub { font-size: 22px; }
      .item-name { font-size: 24px; }
    }
  </style>
</head>
<body>
  <div class="container">
    <div class="header-container">
      <div class="header-main">__HEADER_MAIN__</div>
      <div class="header-sub">__HEADER_SUB__</div>
    </div>
    <div class="item-name">__ITEM_NAME__</div>

    <div class="info-card">
      <div class="card-title">Product Info</div>
__PRODUCT_ROWS__
    </div>

    <div class="info-card">
      <div class="card-title">Purchase Info</div>
__PURCHASE_ROWS__
    </div>

    <div class="info-card">
      <div class="card-title">Halal Info</div>
__HALAL_ROWS__
    </div>

    <div class="stock-request-box">
      <button class="btn btn-purple" type="button">Stock Request</button>
      <label class="quantity-label" for="quantityInput">Quantity:</label>
      <input type="text" class="quantity-input" placeholder="Enter quantity" id="quantityInput" />
      <div class="quantity-error" id="quantityError" role="alert"></div>
      <a href="#" class="btn btn-green" id="sendRequestBtn">Send Request</a>
    </div>

    <a href="index.html" class="back-btn">&larr; Back</a>
  </div>

  <script>
    const PAGE = __PAGE_CONFIG__;
    const DAY_MS = 1000 * 60 * 60 * 24;

    // Same rules as ihic.dates.parse_date
    const INT_PART = /^\s*[+-]?[0-9]+\s*$/;
    const ISO_DATE = /^([0-9]{4})-([0-9]{2})-([0-9]{2})$/;
    const ISO_DATETIME = /^([0-9]{4})-([0-9]{2})-([0-9]{2})[T ]/;

    function inRange(d) {
      return !isNaN(d.getTime()) && d.getFullYear() >= 1 && d.getFullYear() <= 9999;
    }

    function dayFirst(s) {
      const parts = s.split('/');
      if (parts.length < 3 || !parts.slice(0, 3).every(function(p) { return INT_PART.test(p); })) return null;
      const day = Number(parts[0]);
      const month = Number(parts[1]);
      let year = Number(parts[2]);
      if (year >= 0 && year <= 99) year += 1900;
      // Out-of-range day/month roll into neighbouring months
      const d = new Date(year, month - 1, day);
      return inRange(d) ? d : null;
    }

    function isoDate(m) {
      const y = Number(m[1]), mo = Number(m[2]), day = Number(m[3]);
      const d = new Date(y, mo - 1, day);
      // Date-only ISO strings are strict: no rollover, no year 0
      if (d.getFullYear() !== y || d.getMonth() !== mo - 1 || d.getDate() !== day) return null;
      return d;
    }

    function parseDate(raw) {
      const s = String(raw || '').trim();
      if (!s || s === 'NA') return null;
      let d = null;
      if (s.includes('/')) {
        d = dayFirst(s);
      } else if (ISO_DATE.test(s)) {
        d = isoDate(ISO_DATE.exec(s));
      } else if (ISO_DATETIME.test(s) && !isNaN(new Date(s).getTime())) {
        // Keep the calendar date as written, like datetime.date()
        d = isoDate(ISO_DATETIME.exec(s));
      }
      if (!d) return null;
      d.setHours(0, 0, 0, 0);
      return d;
    }

    function formatDate(d) {
      if (!d) return 'N/A';
      const day = String(d.getDate()).padStart(2, '0');
      const month = String(d.getMonth() + 1).padStart(2, '0');
      return day + '/' + month + '/' + d.getFullYear();
    }

    function getExpiryStatus(d, isCertificate) {
      if (!d) return { cls: 'na-value', text: '', alert: false };
      const today = new Date();
      today.setHours(0, 0, 0, 0);
      // Both dates sit on local midnight; rounding absorbs DST shifts
      const days = Math.round((d.getTime() - today.getTime()) / DAY_MS);
      if (days < PAGE.expiredBeforeDays) {
        return {
          cls: 'expired', text: '(Expired)', alert: true, isExpired: true,
          alertText: isCertificate ? 'Certificate Expired. Contact PIC' : 'Item Expired. Contact PIC'
        };
      }
      if (days < PAGE.nearlyExpiredBeforeDays) {
        return {
          cls: 'expired', text: '(Expires in ' + days + ' days)', alert: true, isExpired: false,
          alertText: isCertificate ? 'Certificate Nearly Expired. Contact PIC' : 'Nearly Expired. Contact PIC'
        };
      }
      return { cls: 'valid', text: '(Expires in ' + days + ' days)', alert: false };
    }

    function mailto(subject, body) {
      return 'mailto:' + PAGE.email + '?subject=' + encodeURIComponent(subject) +
             '&body=' + encodeURIComponent(body);
    }

    function itemAlertLink(status) {
      const state = status.isExpired ? 'Expired' : 'Nearly Expired';
      const phrase = status.isExpired ? 'already expired' : 'nearly expired';
      return mailto(
        'High Importance : ' + PAGE.itemName + ' is ' + state,
        'Hi. The ' + PAGE.itemName + ' with Identification Number of ' + PAGE.batchNo +
        ' is ' + phrase + '. Please do the necessary. Thank you.'
      );
    }

    function certAlertLink(status) {
      const state = status.isExpired ? 'Expired' : 'Nearly Expired';
      const phrase = status.isExpired ? 'already expired' : 'nearly expired';
      return mailto(
        'High Importance : ' + PAGE.itemName + ' Halal Certificate is ' + state,
        'Hi. The ' + PAGE.itemName + ' Halal certificate is ' + phrase +
        '. Please do the necessary. Thank you.'
      );
    }

    function refreshExpiry(raw, isCertificate, valueId, alertId, linkFor) {
      const valueEl = document.getElementById(valueId);
      const alertEl = document.getElementById(alertId);
      if (!valueEl) return;
      const d = parseDate(raw);
      const status = getExpiryStatus(d, isCertificate);
      valueEl.className = 'detail-value ' + status.cls;
      valueEl.textContent = String(raw || '').trim() === 'NA'
        ? 'N/A'
        : (formatDate(d) + ' ' + status.text).trim();
      if (!alertEl) return;
      alertEl.innerHTML = '';
      alertEl.hidden = !status.alert;
      if (status.alert) {
        const a = document.createElement('a');
        a.className = 'btn btn-red';
        a.href = linkFor(status);
        a.textContent = status.alertText;
        alertEl.appendChild(a);
      }
    }

    document.addEventListener('DOMContentLoaded', function() {
      refreshExpiry(PAGE.itemExpiry, false, 'itemExpiryDate', 'expiryAlertContainer', itemAlertLink);
      if (PAGE.certAvailable) {
        refreshExpiry(PAGE.certExpiry, true, 'certExpiryDate', 'certAlertContainer', certAlertLink);
      }

      const sendRequestBtn = document.getElementById('sendRequestBtn');
      const quantityInput = document.getElementById('quantityInput');
      const quantityError = document.getElementById('quantityError');

      sendRequestBtn.addEventListener('click', function(e) {
        e.preventDefault();
        const quantity = quantityInput.value.trim();

        if (!quantity) {
          quantityError.textContent = 'Please enter a quantity';
          return;
        }
        if (isNaN(Number(quantity)) || Number(quantity) <= 0) {
          quantityError.textContent = 'Please enter a valid quantity number';
          return;
        }
        quantityError.textContent = '';

        window.location.href = mailto(
          'Stock Request - ' + PAGE.itemName,
          'Hi. I want to request for ' + PAGE.itemName +
          ' (Item ID: ' + PAGE.itemId + ', Batch/GRIS No.: ' + PAGE.batchNo + ')' +
          ' with a quantity of ' + quantity + '. Thank you.'
        );
        quantityInput.value = '';
      });
    });
  </script>
</body>
</html>
"""
